import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load biến môi trường trong .env
BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")
load_dotenv()

API_KEY_ENV = "API_KEY"
API_KEY_ALIASES = ("GEMINI_API_KEY",)


def _get_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if not value:
        return None
    return float(value)


class Settings:
    GEMINI_API_URL: str = os.getenv(
        "GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta"
    )
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-image")

    BACKEND_URL: str = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")

    # None = chờ vô thời hạn (không đặt timeout cho request sinh ảnh)
    BACKEND_TIMEOUT: Optional[float] = _get_optional_float("BACKEND_TIMEOUT")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def api_key(self) -> Optional[str]:
        """
        Đọc key tại thời điểm gọi (không cache), để thiếu key luôn được
        phát hiện ngay trước khi gửi request.
        """
        value = os.getenv(API_KEY_ENV)
        if value:
            return value
        for alias in API_KEY_ALIASES:
            value = os.getenv(alias)
            if value:
                return value
        return None

settings = Settings()
