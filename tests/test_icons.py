"""Tests for condition code to icon token mapping."""

import re

import pytest

from supplyboard.services.icons import (
    BUCKET_NAMES,
    DEFAULT_BUCKET,
    OPENWEATHER_BUCKETS,
    WMO_BUCKETS,
    WMO_DESCRIPTIONS,
    icon_token,
)

TOKEN = re.compile(r"^\d{2}[dn]$")

# Every condition id documented by OpenWeather
OPENWEATHER_CODES = [
    200, 201, 202, 210, 211, 212, 221, 230, 231, 232,
    300, 301, 302, 310, 311, 312, 313, 314, 321,
    500, 501, 502, 503, 504, 511, 520, 521, 522, 531,
    600, 601, 602, 611, 612, 613, 615, 616, 620, 621, 622,
    701, 711, 721, 731, 741, 751, 761, 762, 771, 781,
    800, 801, 802, 803, 804,
]

# Every WMO code Open-Meteo reports
WMO_CODES = [
    0, 1, 2, 3, 45, 48, 51, 53, 55, 56, 57, 61, 63, 65, 66, 67,
    71, 73, 75, 77, 80, 81, 82, 85, 86, 95, 96, 99,
]


class TestIconMapping:
    @pytest.mark.parametrize("code", OPENWEATHER_CODES)
    def test_openweather_codes_are_mapped(self, code: int) -> None:
        assert code in OPENWEATHER_BUCKETS
        assert OPENWEATHER_BUCKETS[code] in BUCKET_NAMES
        assert TOKEN.match(icon_token(code, OPENWEATHER_BUCKETS, is_day=True))

    @pytest.mark.parametrize("code", WMO_CODES)
    def test_wmo_codes_are_mapped(self, code: int) -> None:
        assert code in WMO_BUCKETS
        assert WMO_BUCKETS[code] in BUCKET_NAMES
        assert code in WMO_DESCRIPTIONS

    @pytest.mark.parametrize(
        ("code", "is_day", "expected"),
        [
            (800, True, "01d"),
            (800, False, "01n"),
            (801, True, "02d"),
            (802, True, "03d"),
            (804, False, "04n"),
            (300, True, "09d"),
            (502, True, "10d"),
            (211, False, "11n"),
            (601, True, "13d"),
            (741, True, "50d"),
        ],
    )
    def test_openweather_families(self, code: int, is_day: bool, expected: str) -> None:
        assert icon_token(code, OPENWEATHER_BUCKETS, is_day) == expected

    @pytest.mark.parametrize(
        ("code", "expected"),
        [(0, "01d"), (1, "02d"), (2, "03d"), (3, "04d"), (61, "10d"), (95, "11d"), (73, "13d")],
    )
    def test_wmo_families(self, code: int, expected: str) -> None:
        assert icon_token(code, WMO_BUCKETS, is_day=True) == expected

    @pytest.mark.parametrize("code", [-1, 0, 999, 12345])
    def test_unknown_code_uses_default_bucket(self, code: int) -> None:
        assert icon_token(code, OPENWEATHER_BUCKETS, is_day=True) == f"{DEFAULT_BUCKET}d"
        assert icon_token(code, OPENWEATHER_BUCKETS, is_day=False) == f"{DEFAULT_BUCKET}n"

    def test_unknown_wmo_code_uses_default_bucket(self) -> None:
        assert icon_token(42, WMO_BUCKETS, is_day=False) == f"{DEFAULT_BUCKET}n"
