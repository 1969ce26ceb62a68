"""Supply chain dashboard and cached weather lookup service."""

__version__ = "0.1.0"
