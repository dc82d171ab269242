# frontend/controller.py

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

from backend.encoder import ImageFile, SelectedImage, select_image
from backend.errors import EMPTY_RESULT_MESSAGE, VALIDATION_MESSAGE, PosterError

from .prompts import DEFAULT_PROMPT
from .share import ShareOutcome, ShareTarget, outcome_message, share_poster

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
RESULT_MIME_TYPE = "image/png"

Generator = Callable[[str, ImageFile], Awaitable[Optional[str]]]


# ==========================
# State: đúng 1 trong 4 trạng thái tại mọi thời điểm
# ==========================
@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    request_id: int


@dataclass(frozen=True)
class Result:
    image_url: str


@dataclass(frozen=True)
class Error:
    message: str


UIState = Union[Idle, Loading, Result, Error]


def result_data_url(image_b64: str) -> str:
    return f"data:{RESULT_MIME_TYPE};base64,{image_b64}"


class PosterController:
    """
    State machine của UI:
        Idle -> Loading -> Result | Error
    Chọn ảnh mới -> Idle; bấm generate -> Loading.
    Mỗi lần generate lấy 1 request_id mới; kết quả của request cũ bị bỏ qua.
    """

    def __init__(self, generator: Generator, prompt: str = DEFAULT_PROMPT):
        self._generator = generator
        self._request_ids = itertools.count(1)
        self._pending: Optional[Tuple[int, str, ImageFile]] = None
        self.prompt = prompt
        self.image: Optional[SelectedImage] = None
        self.state: UIState = Idle()
        self.notice: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return isinstance(self.state, Loading)

    @property
    def can_generate(self) -> bool:
        # nút Generate bị disable khi đang loading hoặc chưa có ảnh
        return self.image is not None and not self.is_loading

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def result_url(self) -> Optional[str]:
        return self.state.image_url if isinstance(self.state, Result) else None

    @property
    def error_message(self) -> Optional[str]:
        return self.state.message if isinstance(self.state, Error) else None

    def _invalidate(self) -> None:
        # request đang chạy (nếu có) không còn được ghi kết quả
        next(self._request_ids)
        self._pending = None

    def select_image(self, image: SelectedImage) -> None:
        self._invalidate()
        self.image = image
        self.notice = None
        self.state = Idle()

    def clear_image(self) -> None:
        self._invalidate()
        self.image = None
        self.notice = None
        self.state = Idle()

    async def load_upload(self, upload: Any) -> UIState:
        """
        Xử lý file từ uploader: None (user xoá file) -> Idle, không còn ảnh;
        đọc lỗi -> Error, ảnh cũ bị bỏ.
        """
        if upload is None:
            self.clear_image()
            return self.state
        try:
            selected = await select_image(upload)
        except PosterError as e:
            self.clear_image()
            self.state = Error(str(e))
            return self.state
        self.select_image(selected)
        return self.state

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def begin(self, force: bool = False) -> Optional[int]:
        """
        Pha 1 (đồng bộ): chuyển sang Loading và ghi nhận request chờ chạy.
        force=False: đang loading thì bỏ qua (giống nút bị disable).
        force=True: bỏ qua việc disable, request mới thay thế request cũ.
        Trả về request_id, hoặc None nếu không có request nào được tạo.
        """
        if self.is_loading and not force:
            logger.debug("Generation already in flight, ignoring trigger")
            return None

        if self.image is None or not self.prompt or not self.prompt.strip():
            self._pending = None
            self.state = Error(VALIDATION_MESSAGE)
            return None

        request_id = next(self._request_ids)
        self._pending = (request_id, self.prompt, self.image.file)
        self.notice = None
        self.state = Loading(request_id)
        return request_id

    async def run_pending(self) -> UIState:
        """Pha 2: gọi generator cho request đã begin(); không có thì giữ nguyên state."""
        if self._pending is None:
            return self.state
        request_id, prompt, image = self._pending
        self._pending = None

        try:
            image_b64 = await self._generator(prompt, image)
        except PosterError as e:
            new_state: UIState = Error(str(e) or UNEXPECTED_ERROR_MESSAGE)
        except Exception:
            logger.exception("Unexpected error during generation")
            new_state = Error(UNEXPECTED_ERROR_MESSAGE)
        else:
            if image_b64:
                new_state = Result(result_data_url(image_b64))
            else:
                new_state = Error(EMPTY_RESULT_MESSAGE)

        if self.state != Loading(request_id):
            logger.info("Discarding stale result of request %d", request_id)
            return self.state

        self.state = new_state
        return self.state

    async def generate(self, force: bool = False) -> UIState:
        if self.begin(force) is None:
            return self.state
        return await self.run_pending()

    def share(self, target: Optional[ShareTarget]) -> ShareOutcome:
        """Share không làm thay đổi state (Result/Error giữ nguyên)."""
        outcome = share_poster(self.result_url, target)
        self.notice = outcome_message(outcome)
        return outcome
