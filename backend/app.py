# backend/app.py

import logging
from typing import Awaitable, Callable, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile

from config.logging_setup import configure_logging
from config.settings import settings

from .encoder import ImageFile, read_upload
from .errors import (
    ConfigurationError,
    GenerationError,
    ImageReadError,
    InputValidationError,
)
from .gemini_client import generate_poster
from .model import GenerateResponse, HealthResponse

Generator = Callable[[str, ImageFile], Awaitable[Optional[str]]]

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Cinematic Poster Service")


def get_generator() -> Generator:
    return generate_poster


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(api_key_configured=bool(settings.api_key))


@app.post("/generate", response_model=GenerateResponse)
async def generate(
    prompt: str = Form(""),
    image: Optional[UploadFile] = File(None),
    generator: Generator = Depends(get_generator),
):
    """
    Nhận ảnh + prompt (multipart), trả về base64 ảnh poster.
    status="empty" khi API trả lời thành công nhưng không có ảnh.
    """
    try:
        if image is None or not prompt.strip():
            raise InputValidationError()
        image_file = await read_upload(image)
        image_b64 = await generator(prompt, image_file)
    except (InputValidationError, ImageReadError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        logger.error("Generation refused: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if image_b64 is None:
        return GenerateResponse(status="empty")
    return GenerateResponse(status="done", image_base64=image_b64)
