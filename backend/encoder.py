# backend/encoder.py

import base64
import binascii
import inspect
import logging
import mimetypes
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import ImageReadError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
DATA_URL_PREFIX = "data:"
BASE64_SUFFIX = ";base64"
BASE64_MARKER = BASE64_SUFFIX + ","


@dataclass(frozen=True)
class ImageFile:
    """File ảnh thô user chọn (bytes + tên + MIME)."""

    name: str
    mime_type: str
    content: bytes


@dataclass(frozen=True)
class EncodedImage:
    """Dạng gửi đi: base64 trần (không có prefix data URL) + MIME gốc."""

    mime_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"{DATA_URL_PREFIX}{self.mime_type}{BASE64_MARKER}{self.data}"


@dataclass(frozen=True)
class SelectedImage:
    file: ImageFile
    preview_url: str


def to_data_url(mime_type: str, content: bytes) -> str:
    payload = base64.b64encode(content).decode("ascii")
    return f"{DATA_URL_PREFIX}{mime_type}{BASE64_MARKER}{payload}"


def strip_data_url(data_url: str) -> Tuple[str, str]:
    """
    "data:image/jpeg;base64,...." -> ("image/jpeg", "....")
    """
    if not data_url or not data_url.startswith(DATA_URL_PREFIX) or "," not in data_url:
        raise ImageReadError()
    header, payload = data_url.split(",", 1)
    # ";base64" phải nằm trong header, ngay trước dấu phẩy đầu tiên
    if not header.endswith(BASE64_SUFFIX):
        raise ImageReadError()
    mime_type = header[len(DATA_URL_PREFIX):-len(BASE64_SUFFIX)] or DEFAULT_MIME_TYPE
    return mime_type, payload


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    mime_type, payload = strip_data_url(data_url)
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageReadError() from e


def sniff_mime_type(content: bytes, filename: Optional[str] = None) -> str:
    """
    Đoán MIME khi uploader không báo type:
    1. Pillow đọc header ảnh
    2. mimetypes theo đuôi file
    3. application/octet-stream
    """
    try:
        with Image.open(BytesIO(content)) as img:
            mime = Image.MIME.get(img.format or "")
            if mime:
                return mime
    except (UnidentifiedImageError, OSError):
        pass

    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return DEFAULT_MIME_TYPE


async def read_upload(upload: Any) -> ImageFile:
    """
    Đọc bytes từ file upload. Hỗ trợ:
    - streamlit UploadedFile (read() đồng bộ, .name, .type)
    - starlette UploadFile (read() async, .filename, .content_type)
    Lỗi đọc file -> ImageReadError (không trả về giá trị rỗng/undefined).
    """
    if upload is None:
        raise ImageReadError()

    name = getattr(upload, "filename", None) or getattr(upload, "name", None) or "upload"
    mime_type = getattr(upload, "content_type", None) or getattr(upload, "type", None)

    try:
        content = upload.read()
        if inspect.isawaitable(content):
            content = await content
    except Exception as e:
        logger.warning("Failed to read uploaded file %s: %s", name, e)
        raise ImageReadError() from e

    if not isinstance(content, (bytes, bytearray)) or not content:
        logger.warning("Uploaded file %s produced no data", name)
        raise ImageReadError()

    content = bytes(content)
    if not mime_type:
        mime_type = sniff_mime_type(content, name)

    return ImageFile(name=name, mime_type=mime_type, content=content)


async def select_image(upload: Any) -> SelectedImage:
    image = await read_upload(upload)
    return SelectedImage(file=image, preview_url=to_data_url(image.mime_type, image.content))


async def encode_image(image: ImageFile) -> EncodedImage:
    """Trả về base64 trần = phần sau dấu phẩy của data URL preview."""
    _, payload = strip_data_url(to_data_url(image.mime_type, image.content))
    return EncodedImage(mime_type=image.mime_type, data=payload)


def to_inline_part(encoded: EncodedImage) -> Dict[str, Any]:
    return {
        "inlineData": {
            "data": encoded.data,
            "mimeType": encoded.mime_type,
        }
    }
