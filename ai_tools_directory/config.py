"""Project configuration read from the environment."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SHEET_NAME = "Sheet1"


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Environment variable {name} must be set for the selected backend.")
    return value


def storage_backend() -> str:
    return os.getenv("AITOOLS_STORAGE_BACKEND", "local").lower()


def tools_source() -> str:
    return os.getenv("AITOOLS_TOOLS_SOURCE", "local").lower()


def local_data_dir() -> Path:
    base = Path(os.getenv("AITOOLS_LOCAL_DATA_DIR", "data"))
    base.mkdir(parents=True, exist_ok=True)
    return base


def cache_dir() -> Path:
    return Path(os.getenv("AITOOLS_CACHE_DIR", "dev_cache"))


def http_timeout() -> float:
    try:
        return float(os.getenv("AITOOLS_HTTP_TIMEOUT", "10"))
    except ValueError:
        return 10.0


def sheety_url() -> str:
    return _require_env("SHEETY_URL").rstrip("/")


def sheety_token() -> str:
    return os.getenv("SHEETY_TOKEN", "")


def google_sheet_id() -> str:
    return _require_env("GOOGLE_SHEET_ID")


def google_sheet_name() -> str:
    return os.getenv("GOOGLE_SHEET_NAME", DEFAULT_SHEET_NAME)


def minio_settings() -> dict:
    """Connection settings for the MinIO store."""
    return {
        "endpoint": _require_env("MINIO_ENDPOINT"),
        "access_key": _require_env("MINIO_ACCESS_KEY"),
        "secret_key": _require_env("MINIO_SECRET_KEY"),
        "bucket_name": _require_env("MINIO_BUCKET_NAME"),
        "secure": os.getenv("MINIO_SECURE", "true").lower() == "true",
    }


def base_path() -> str:
    return os.getenv("BASE_PATH", "").rstrip("/")


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO")
