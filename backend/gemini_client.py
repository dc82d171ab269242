# backend/gemini_client.py

import logging
from typing import Any, Dict, Optional

import httpx

from config.settings import settings

from .encoder import EncodedImage, ImageFile, encode_image, to_inline_part
from .errors import ConfigurationError, GenerationError
from .model import GeminiResponse

logger = logging.getLogger(__name__)

RESPONSE_MODALITIES = ["IMAGE"]


def build_generate_url(model: Optional[str] = None) -> str:
    base = settings.GEMINI_API_URL.rstrip("/")
    return f"{base}/models/{model or settings.GEMINI_MODEL}:generateContent"


def build_request_body(prompt: str, encoded: EncodedImage) -> Dict[str, Any]:
    """
    1 request, 2 part theo đúng thứ tự: text prompt -> ảnh inline.
    Bắt buộc response có modality IMAGE.
    """
    return {
        "contents": [
            {
                "parts": [
                    {"text": prompt},
                    to_inline_part(encoded),
                ]
            }
        ],
        "generationConfig": {
            "responseModalities": list(RESPONSE_MODALITIES),
        },
    }


def extract_first_image(response: GeminiResponse) -> Optional[str]:
    """
    Lấy base64 của part inlineData đầu tiên trong candidate đầu tiên.
    Không có ảnh -> None (không phải lỗi).
    """
    if not response.candidates:
        return None
    content = response.candidates[0].content
    if content is None:
        return None
    for part in content.parts:
        if part.inline_data is not None:
            return part.inline_data.data
    return None


async def generate_poster(
    prompt: str,
    image: ImageFile,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """
    Gửi prompt + ảnh sang Gemini, trả về base64 của ảnh sinh ra hoặc None.

    - Thiếu API key -> ConfigurationError, không gọi mạng.
    - Lỗi mạng / HTTP != 2xx / response sai format -> GenerationError
      (chi tiết chỉ ghi log).
    """
    api_key = settings.api_key
    if not api_key:
        raise ConfigurationError()

    # Encode xong hoàn toàn rồi mới build request
    encoded = await encode_image(image)
    body = build_request_body(prompt, encoded)
    url = build_generate_url()
    headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}

    logger.info(
        "Requesting poster from %s (mime=%s, prompt_len=%d)",
        settings.GEMINI_MODEL,
        encoded.mime_type,
        len(prompt),
    )

    try:
        if client is None:
            # Không đặt timeout: chờ đến khi service trả lời
            async with httpx.AsyncClient(timeout=None) as own_client:
                r = await own_client.post(url, json=body, headers=headers)
        else:
            r = await client.post(url, json=body, headers=headers)

        if r.status_code != 200:
            logger.error("Gemini returned %s: %s", r.status_code, r.text[:500])
        r.raise_for_status()

        parsed = GeminiResponse.model_validate(r.json())
    except (httpx.HTTPError, ValueError) as e:
        logger.exception("Error generating content: %s", e)
        raise GenerationError() from e

    image_b64 = extract_first_image(parsed)
    if image_b64 is None:
        logger.warning(
            "Gemini response contained no image (candidates=%d)", len(parsed.candidates)
        )
    return image_b64
