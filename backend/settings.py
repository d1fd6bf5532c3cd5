import os

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    return int(val)


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    return float(val)


class Settings:
    def __init__(self) -> None:
        self.OVERPASS_API_URL: str = os.getenv(
            "OVERPASS_API_URL", "https://overpass-api.de/api/interpreter"
        )
        # Server-side budget; large radii need the generous value to avoid 504s.
        self.OVERPASS_QUERY_TIMEOUT_SEC: int = _as_int(os.getenv("OVERPASS_QUERY_TIMEOUT_SEC"), 90)
        self.OVERPASS_HTTP_TIMEOUT_SEC: float = _as_float(os.getenv("OVERPASS_HTTP_TIMEOUT_SEC"), 100.0)

        self.NOMINATIM_BASE_URL: str = os.getenv(
            "NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"
        ).rstrip("/")
        self.NOMINATIM_USER_AGENT: str | None = os.getenv("NOMINATIM_USER_AGENT")
        self.NOMINATIM_REFERER: str | None = os.getenv("NOMINATIM_REFERER")
        self.NOMINATIM_MIN_INTERVAL: float = _as_float(os.getenv("NOMINATIM_MIN_INTERVAL"), 1.1)
        self.NOMINATIM_HTTP_TIMEOUT_SEC: float = _as_float(os.getenv("NOMINATIM_HTTP_TIMEOUT_SEC"), 10.0)

        self.DEFAULT_RADIUS_M: int = _as_int(os.getenv("DEFAULT_RADIUS_M"), 1000)
        self.MIN_RADIUS_M: int = _as_int(os.getenv("MIN_RADIUS_M"), 500)
        self.MAX_RADIUS_M: int = _as_int(os.getenv("MAX_RADIUS_M"), 5000)

        self.RESULT_CAP: int = _as_int(os.getenv("RESULT_CAP"), 50)
        self.PICK_TICKS: int = _as_int(os.getenv("PICK_TICKS"), 30)
        self.PICK_INTERVAL_MS: int = _as_int(os.getenv("PICK_INTERVAL_MS"), 70)

        self.CORS_ALLOW_ALL: bool = _as_bool(os.getenv("CORS_ALLOW_ALL"), True)


settings = Settings()
