# backend/model.py
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Status = Literal["done", "empty"]


class GenerateResponse(BaseModel):
    status: Status
    image_base64: Optional[str] = None  # None khi API không trả về ảnh


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    api_key_configured: bool


# ==========================
# Response của Gemini generateContent (chỉ các field cần dùng)
# ==========================
class _GeminiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class InlineData(_GeminiModel):
    data: str
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class Part(_GeminiModel):
    text: Optional[str] = None
    inline_data: Optional[InlineData] = Field(default=None, alias="inlineData")


class Content(_GeminiModel):
    parts: List[Part] = Field(default_factory=list)
    role: Optional[str] = None

    @field_validator("parts", mode="before")
    @classmethod
    def _none_parts(cls, v):
        return [] if v is None else v


class Candidate(_GeminiModel):
    content: Optional[Content] = None
    finish_reason: Optional[str] = Field(default=None, alias="finishReason")


class GeminiResponse(_GeminiModel):
    candidates: List[Candidate] = Field(default_factory=list)

    # "candidates": null = không có ảnh, không phải response lỗi
    @field_validator("candidates", mode="before")
    @classmethod
    def _none_candidates(cls, v):
        return [] if v is None else v
