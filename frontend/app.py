import asyncio
import base64
from io import BytesIO
from typing import Optional

import streamlit as st
from PIL import Image, UnidentifiedImageError

from config.logging_setup import configure_logging
from config.settings import settings
from frontend.backend_client import generate_via_backend
from frontend.controller import PosterController
from frontend.share import BrowserShareTarget, SHARE_FILE_NAME

configure_logging()


def get_controller() -> PosterController:
    if "controller" not in st.session_state:
        st.session_state["controller"] = PosterController(generator=generate_via_backend)
    return st.session_state["controller"]


def decode_result(image_url: str) -> Optional[bytes]:
    """data:image/png;base64,... -> bytes ảnh"""
    _, _, payload = image_url.partition(",")
    try:
        return base64.b64decode(payload)
    except ValueError:
        return None


def on_file_change() -> None:
    # None = user bấm xoá file trên uploader
    upload = st.session_state.get("file_upload")
    asyncio.run(get_controller().load_upload(upload))


def on_generate_click() -> None:
    # Pha 1: chỉ chuyển sang Loading; lần chạy script kế tiếp vẽ nút ở trạng thái
    # disabled rồi mới gọi backend
    get_controller().begin()


# ==========================
# Cấu hình
# ==========================
st.set_page_config(
    page_title="Cinematic Football Poster Generator",
    page_icon="⚽",
    layout="wide"
)

st.title("⚽ Cinematic Football Poster Generator")
st.caption("Upload a photo, describe your vision, and let AI create a stunning poster.")

ctrl = get_controller()

controls, output = st.columns(2, gap="large")

# ==========================
# Controls panel
# ==========================
with controls:
    st.subheader("1. Upload Your Photo")
    st.file_uploader(
        "Change image" if ctrl.image else "Select an image",
        type=["png", "jpg", "jpeg", "webp", "gif", "bmp"],
        key="file_upload",
        on_change=on_file_change,
    )
    if ctrl.image is not None:
        st.image(ctrl.image.preview_url, caption="Input preview", width=300)

    st.subheader("2. Describe the Poster")
    prompt = st.text_area(
        "Prompt", value=ctrl.prompt, key="prompt", height=260, label_visibility="collapsed"
    )
    ctrl.set_prompt(prompt)

    st.button(
        "⏳ Generating..." if ctrl.is_loading else "🪄 Generate Poster",
        key="generate",
        on_click=on_generate_click,
        disabled=not ctrl.can_generate,
        width="stretch",
        type="primary",
    )

# ==========================
# Output panel
# ==========================
with output:
    if ctrl.has_pending:
        # Pha 2: nút đã được vẽ disabled ở trên
        with st.spinner("Conjuring up your masterpiece... this may take a moment."):
            asyncio.run(ctrl.run_pending())
        st.rerun()

    if ctrl.error_message:
        st.error(f"**An error occurred:**\n\n{ctrl.error_message}")
    elif ctrl.result_url:
        img_bytes = decode_result(ctrl.result_url)
        try:
            image = Image.open(BytesIO(img_bytes)) if img_bytes else None
        except (UnidentifiedImageError, OSError):
            image = None
        st.image(image if image is not None else ctrl.result_url,
                 caption="Generated football poster", width="stretch")

        # chỉ hiện nút share; share thật diễn ra khi user bấm trong trình duyệt
        ctrl.share(BrowserShareTarget())
        if img_bytes:
            st.download_button(
                "⬇️ Download",
                data=img_bytes,
                file_name=SHARE_FILE_NAME,
                mime="image/png",
            )
    elif not ctrl.is_loading:
        st.info("Your generated poster will appear here.")

    if ctrl.notice:
        st.warning(ctrl.notice)

st.markdown("---")
st.caption("made with ❤️‍🔥 by Sourabh · backend: " + settings.BACKEND_URL)
