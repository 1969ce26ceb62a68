"""Export stub returning a synthetic completion record."""

import asyncio
import uuid
from datetime import UTC, datetime

import structlog

from supplyboard.api.schemas import ExportRequest, ExportResult

logger = structlog.get_logger()


class ExportService:
    """Pretends to build an export file, taking a fixed amount of time."""

    def __init__(self, delay_seconds: float) -> None:
        self._delay = delay_seconds

    async def export(self, request: ExportRequest) -> ExportResult:
        datasets = [
            name for name, selected in request.include_data.model_dump().items() if selected
        ]
        export_id = uuid.uuid4().hex[:12]
        logger.info(
            "Export started",
            export_id=export_id,
            format=request.format,
            date_range=request.date_range,
            datasets=datasets,
        )

        await asyncio.sleep(self._delay)

        completed_at = datetime.now(UTC)
        file_name = f"supplyboard-{completed_at:%Y%m%d}-{export_id}.{request.format}"
        logger.info("Export completed", export_id=export_id, file_name=file_name)
        return ExportResult(
            export_id=export_id,
            message="Export completed successfully",
            format=request.format,
            date_range=request.date_range,
            datasets=datasets,
            file_name=file_name,
            download_url=f"/downloads/{file_name}",
            completed_at=completed_at,
        )
