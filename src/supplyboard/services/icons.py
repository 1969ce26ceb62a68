"""Condition code to icon token mapping.

Every provider reports weather conditions in its own code space. These
tables translate them into a shared vocabulary of ``<bucket><d|n>`` tokens,
where the bucket is the condition family:

    01 clear, 02 partly cloudy, 03 cloudy, 04 overcast,
    09 showers/drizzle, 10 rain, 11 thunderstorm, 13 snow, 50 mist/fog

Codes missing from a table fall into ``DEFAULT_BUCKET``.
"""

CLEAR = "01"
PARTLY_CLOUDY = "02"
CLOUDY = "03"
OVERCAST = "04"
SHOWERS = "09"
RAIN = "10"
THUNDERSTORM = "11"
SNOW = "13"
MIST = "50"

DEFAULT_BUCKET = CLOUDY

BUCKET_NAMES: dict[str, str] = {
    CLEAR: "Clear",
    PARTLY_CLOUDY: "Clouds",
    CLOUDY: "Clouds",
    OVERCAST: "Clouds",
    SHOWERS: "Drizzle",
    RAIN: "Rain",
    THUNDERSTORM: "Thunderstorm",
    SNOW: "Snow",
    MIST: "Mist",
}


def _bucket_all(bucket: str, *codes: int) -> dict[int, str]:
    return dict.fromkeys(codes, bucket)


# OpenWeather condition ids (https://openweathermap.org/weather-conditions)
OPENWEATHER_BUCKETS: dict[int, str] = {
    **_bucket_all(THUNDERSTORM, 200, 201, 202, 210, 211, 212, 221, 230, 231, 232),
    **_bucket_all(SHOWERS, 300, 301, 302, 310, 311, 312, 313, 314, 321),
    **_bucket_all(RAIN, 500, 501, 502, 503, 504),
    **_bucket_all(SNOW, 511),
    **_bucket_all(SHOWERS, 520, 521, 522, 531),
    **_bucket_all(SNOW, 600, 601, 602, 611, 612, 613, 615, 616, 620, 621, 622),
    **_bucket_all(MIST, 701, 711, 721, 731, 741, 751, 761, 762, 771, 781),
    800: CLEAR,
    801: PARTLY_CLOUDY,
    802: CLOUDY,
    803: OVERCAST,
    804: OVERCAST,
}

# WMO weather interpretation codes, as reported by Open-Meteo
WMO_BUCKETS: dict[int, str] = {
    0: CLEAR,
    1: PARTLY_CLOUDY,
    2: CLOUDY,
    3: OVERCAST,
    **_bucket_all(MIST, 45, 48),
    **_bucket_all(SHOWERS, 51, 53, 55, 56, 57),
    **_bucket_all(RAIN, 61, 63, 65, 66, 67),
    **_bucket_all(SNOW, 71, 73, 75, 77, 85, 86),
    **_bucket_all(SHOWERS, 80, 81, 82),
    **_bucket_all(THUNDERSTORM, 95, 96, 99),
}

WMO_DESCRIPTIONS: dict[int, str] = {
    0: "clear sky",
    1: "mainly clear",
    2: "partly cloudy",
    3: "overcast",
    45: "fog",
    48: "depositing rime fog",
    51: "light drizzle",
    53: "moderate drizzle",
    55: "dense drizzle",
    56: "light freezing drizzle",
    57: "dense freezing drizzle",
    61: "slight rain",
    63: "moderate rain",
    65: "heavy rain",
    66: "light freezing rain",
    67: "heavy freezing rain",
    71: "slight snow fall",
    73: "moderate snow fall",
    75: "heavy snow fall",
    77: "snow grains",
    80: "slight rain showers",
    81: "moderate rain showers",
    82: "violent rain showers",
    85: "slight snow showers",
    86: "heavy snow showers",
    95: "thunderstorm",
    96: "thunderstorm with slight hail",
    99: "thunderstorm with heavy hail",
}


def bucket_for(code: int, table: dict[int, str]) -> str:
    """Return the condition bucket for a provider code."""
    return table.get(code, DEFAULT_BUCKET)


def icon_token(code: int, table: dict[int, str], is_day: bool) -> str:
    """Return the ``<bucket><d|n>`` icon token for a provider code."""
    return f"{bucket_for(code, table)}{'d' if is_day else 'n'}"


def condition_name(bucket: str) -> str:
    return BUCKET_NAMES.get(bucket, BUCKET_NAMES[DEFAULT_BUCKET])


def wmo_description(code: int) -> str:
    return WMO_DESCRIPTIONS.get(code, "unknown")
