# frontend/share.py

import base64
import enum
import html
import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from backend.encoder import decode_data_url
from backend.errors import ImageReadError

logger = logging.getLogger(__name__)

SHARE_FILE_NAME = "football-poster.png"
SHARE_TITLE = "My Cinematic Football Poster"
SHARE_TEXT = "Check out this awesome football poster I created with AI!"

UNSUPPORTED_MESSAGE = "Sharing is not supported on this device or no image is available."
CANNOT_SHARE_FILES_MESSAGE = "This poster can't be shared from this browser."
SHARE_FAILED_MESSAGE = "Something went wrong while trying to share."


class ShareOutcome(enum.Enum):
    SHARED = "shared"
    # nút share đã hiện ra, kết quả cuối do trình duyệt xử lý
    OFFERED = "offered"
    UNSUPPORTED = "unsupported"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ShareCancelled(Exception):
    """User đóng hộp thoại share (AbortError phía trình duyệt)."""


@dataclass(frozen=True)
class SharedFile:
    name: str
    mime_type: str
    content: bytes


class ShareTarget(Protocol):
    def can_share(self, files: List[SharedFile]) -> bool: ...

    def share(self, files: List[SharedFile], title: str, text: str) -> Optional[ShareOutcome]: ...


def build_share_file(image_url: str) -> SharedFile:
    mime_type, content = decode_data_url(image_url)
    return SharedFile(name=SHARE_FILE_NAME, mime_type=mime_type, content=content)


def share_poster(image_url: Optional[str], target: Optional[ShareTarget]) -> ShareOutcome:
    """
    Đưa poster cho share sheet của nền tảng.
    Huỷ share -> CANCELLED (bỏ qua im lặng), không phải lỗi.
    """
    if not image_url or target is None:
        return ShareOutcome.UNSUPPORTED

    try:
        files = [build_share_file(image_url)]
    except ImageReadError:
        logger.warning("Result image is not a valid data URL, cannot share")
        return ShareOutcome.UNSUPPORTED

    if not target.can_share(files):
        return ShareOutcome.UNSUPPORTED

    try:
        outcome = target.share(files, title=SHARE_TITLE, text=SHARE_TEXT)
    except ShareCancelled:
        return ShareOutcome.CANCELLED
    except Exception:
        logger.exception("Share failed")
        return ShareOutcome.FAILED
    return outcome or ShareOutcome.SHARED


def outcome_message(outcome: ShareOutcome) -> Optional[str]:
    if outcome is ShareOutcome.UNSUPPORTED:
        return UNSUPPORTED_MESSAGE
    if outcome is ShareOutcome.FAILED:
        return SHARE_FAILED_MESSAGE
    return None


# ==========================
# Web Share API (chạy trong iframe của streamlit component)
# ==========================
_SHARE_SCRIPT = """
<div style="display:flex;flex-direction:column;align-items:center;font-family:sans-serif">
  <button id="share-btn" style="padding:8px 24px;border:none;border-radius:6px;
      background:#16a34a;color:#fff;font-size:16px;cursor:pointer">{label}</button>
  <p id="share-msg" style="color:#f87171;font-size:14px"></p>
</div>
<script>
  const payload = {payload};
  const msg = document.getElementById("share-msg");
  const toFile = () => {{
    const bin = atob(payload.data);
    const bytes = new Uint8Array(bin.length);
    for (let i = 0; i < bin.length; i++) bytes[i] = bin.charCodeAt(i);
    return new File([bytes], payload.name, {{ type: payload.mimeType }});
  }};
  document.getElementById("share-btn").addEventListener("click", async () => {{
    msg.textContent = "";
    if (!navigator.share) {{
      msg.textContent = payload.unsupported;
      return;
    }}
    try {{
      const file = toFile();
      if (navigator.canShare && navigator.canShare({{ files: [file] }})) {{
        await navigator.share({{ files: [file], title: payload.title, text: payload.text }});
      }} else {{
        msg.textContent = payload.cannotShare;
      }}
    }} catch (err) {{
      if (err.name !== "AbortError") {{
        console.error("Share failed:", err);
        msg.textContent = payload.failed;
      }}
    }}
  }});
</script>
"""


def render_share_html(files: List[SharedFile], title: str, text: str, label: str = "Share Poster") -> str:
    f = files[0]
    payload = {
        "name": f.name,
        "mimeType": f.mime_type,
        "data": base64.b64encode(f.content).decode("ascii"),
        "title": title,
        "text": text,
        "unsupported": UNSUPPORTED_MESSAGE,
        "cannotShare": CANNOT_SHARE_FILES_MESSAGE,
        "failed": SHARE_FAILED_MESSAGE,
    }
    # "</" trong JSON có thể đóng thẻ <script> sớm
    payload_json = json.dumps(payload).replace("</", "<\\/")
    return _SHARE_SCRIPT.format(label=html.escape(label), payload=payload_json)


class BrowserShareTarget:
    """
    Share qua navigator.share của trình duyệt. Kiểm tra canShare và AbortError
    diễn ra phía trình duyệt (cần user click trực tiếp trong iframe).
    """

    def __init__(self, height: int = 90):
        self.height = height

    def can_share(self, files: List[SharedFile]) -> bool:
        return bool(files)

    def share(self, files: List[SharedFile], title: str, text: str) -> ShareOutcome:
        import streamlit.components.v1 as components

        components.html(render_share_html(files, title, text), height=self.height)
        return ShareOutcome.OFFERED
