# frontend/backend_client.py

import asyncio
import logging
from typing import Optional

import requests

from backend.encoder import ImageFile
from backend.errors import (
    MISSING_KEY_MESSAGE,
    ConfigurationError,
    GenerationError,
    InputValidationError,
)
from config.settings import settings

logger = logging.getLogger(__name__)


def _error_detail(resp: requests.Response) -> Optional[str]:
    try:
        detail = resp.json().get("detail")
    except ValueError:
        return None
    return detail if isinstance(detail, str) else None


def call_generate(prompt: str, image: ImageFile, backend_url: Optional[str] = None) -> Optional[str]:
    """Gọi POST /generate -> base64 ảnh poster hoặc None"""
    base = (backend_url or settings.BACKEND_URL).rstrip("/")
    files = {"image": (image.name, image.content, image.mime_type)}
    data = {"prompt": prompt}

    try:
        resp = requests.post(
            f"{base}/generate", data=data, files=files, timeout=settings.BACKEND_TIMEOUT
        )
    except requests.RequestException as e:
        logger.error("Backend unreachable at %s: %s", base, e)
        raise GenerationError() from e

    if resp.status_code != 200:
        detail = _error_detail(resp)
        logger.error("Backend returned %s: %s", resp.status_code, resp.text[:300])
        if resp.status_code == 400:
            raise InputValidationError(detail) if detail else InputValidationError()
        if detail == MISSING_KEY_MESSAGE:
            raise ConfigurationError(detail)
        raise GenerationError()

    try:
        body = resp.json()
    except ValueError as e:
        logger.error("Backend sent invalid JSON: %s", resp.text[:300])
        raise GenerationError() from e

    if body.get("status") == "empty":
        return None
    image_b64 = body.get("image_base64")
    if not image_b64:
        raise GenerationError()
    return image_b64


async def generate_via_backend(prompt: str, image: ImageFile) -> Optional[str]:
    return await asyncio.to_thread(call_generate, prompt, image)
