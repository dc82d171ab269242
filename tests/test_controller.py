"""
Tests for the UI controller state machine.
"""

import asyncio
import unittest
from unittest.mock import AsyncMock

from backend.encoder import ImageFile, SelectedImage, to_data_url
from backend.errors import (
    API_ERROR_MESSAGE,
    EMPTY_RESULT_MESSAGE,
    MISSING_KEY_MESSAGE,
    READ_ERROR_MESSAGE,
    VALIDATION_MESSAGE,
    ConfigurationError,
    GenerationError,
)
from frontend.controller import (
    UNEXPECTED_ERROR_MESSAGE,
    Error,
    Idle,
    Loading,
    PosterController,
    Result,
)
from frontend.prompts import DEFAULT_PROMPT
from frontend.share import UNSUPPORTED_MESSAGE, ShareOutcome

from conftest import TEST_PROMPT, FakeUpload


def make_selected(content: bytes = b"ABC", name: str = "photo.jpg", mime: str = "image/jpeg") -> SelectedImage:
    image = ImageFile(name=name, mime_type=mime, content=content)
    return SelectedImage(file=image, preview_url=to_data_url(mime, content))


class TestInitialState(unittest.TestCase):

    def test_defaults(self):
        ctrl = PosterController(generator=AsyncMock())
        self.assertEqual(ctrl.state, Idle())
        self.assertEqual(ctrl.prompt, DEFAULT_PROMPT)
        self.assertFalse(ctrl.can_generate)

    def test_select_image_enables_trigger(self):
        ctrl = PosterController(generator=AsyncMock())
        ctrl.select_image(make_selected())
        self.assertTrue(ctrl.can_generate)
        self.assertEqual(ctrl.state, Idle())


class TestGenerate(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.generator = AsyncMock(return_value="QUJD")
        self.ctrl = PosterController(generator=self.generator, prompt=TEST_PROMPT)

    async def test_missing_image_never_calls_service(self):
        state = await self.ctrl.generate()
        self.assertEqual(state, Error(VALIDATION_MESSAGE))
        self.generator.assert_not_awaited()

    async def test_empty_prompt_never_calls_service(self):
        self.ctrl.select_image(make_selected())
        for prompt in ("", "   \n"):
            self.ctrl.set_prompt(prompt)
            state = await self.ctrl.generate()
            self.assertEqual(state, Error(VALIDATION_MESSAGE))
        self.generator.assert_not_awaited()

    async def test_photo_to_png_result(self):
        self.ctrl.select_image(make_selected(name="photo.jpg", mime="image/jpeg"))
        state = await self.ctrl.generate()

        self.assertEqual(state, Result("data:image/png;base64,QUJD"))
        self.assertEqual(self.ctrl.result_url, "data:image/png;base64,QUJD")
        self.assertIsNone(self.ctrl.error_message)
        prompt, image = self.generator.await_args.args
        self.assertEqual(prompt, TEST_PROMPT)
        self.assertEqual(image.mime_type, "image/jpeg")

    async def test_absent_image_is_empty_result_error(self):
        self.generator.return_value = None
        self.ctrl.select_image(make_selected())
        state = await self.ctrl.generate()
        self.assertEqual(state, Error(EMPTY_RESULT_MESSAGE))
        self.assertNotEqual(state.message, API_ERROR_MESSAGE)

    async def test_generation_error_shows_generic_message(self):
        self.generator.side_effect = GenerationError()
        self.ctrl.select_image(make_selected())
        self.assertEqual(await self.ctrl.generate(), Error(API_ERROR_MESSAGE))

    async def test_configuration_error_message(self):
        self.generator.side_effect = ConfigurationError()
        self.ctrl.select_image(make_selected())
        self.assertEqual(await self.ctrl.generate(), Error(MISSING_KEY_MESSAGE))

    async def test_unknown_exception_hides_diagnostics(self):
        self.generator.side_effect = KeyError("candidates[0].content internal")
        self.ctrl.select_image(make_selected())
        state = await self.ctrl.generate()
        self.assertEqual(state, Error(UNEXPECTED_ERROR_MESSAGE))
        self.assertNotIn("internal", state.message)

    async def test_new_generation_clears_previous_error(self):
        self.ctrl.select_image(make_selected())
        self.generator.side_effect = GenerationError()
        await self.ctrl.generate()

        self.generator.side_effect = None
        self.generator.return_value = "QUJD"
        self.assertIsInstance(await self.ctrl.generate(), Result)
        self.assertIsNone(self.ctrl.error_message)

    async def test_select_image_resets_result(self):
        self.ctrl.select_image(make_selected())
        await self.ctrl.generate()
        self.ctrl.select_image(make_selected(b"DEF"))
        self.assertEqual(self.ctrl.state, Idle())
        self.assertIsNone(self.ctrl.result_url)


class TestInFlight(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.release = asyncio.Event()
        self.calls = 0

        async def slow_generator(prompt, image):
            self.calls += 1
            await self.release.wait()
            return "QUJD"

        self.ctrl = PosterController(generator=slow_generator, prompt=TEST_PROMPT)
        self.ctrl.select_image(make_selected())

    async def test_second_trigger_while_pending_is_noop(self):
        first = asyncio.create_task(self.ctrl.generate())
        await asyncio.sleep(0)
        self.assertIsInstance(self.ctrl.state, Loading)
        self.assertFalse(self.ctrl.can_generate)

        state = await self.ctrl.generate()
        self.assertIsInstance(state, Loading)
        self.assertEqual(self.calls, 1)

        self.release.set()
        self.assertEqual(await first, Result("data:image/png;base64,QUJD"))
        self.assertTrue(self.ctrl.can_generate)

    async def test_stale_result_does_not_overwrite_new_selection(self):
        pending = asyncio.create_task(self.ctrl.generate())
        await asyncio.sleep(0)

        self.ctrl.select_image(make_selected(b"NEW"))
        self.release.set()
        await pending

        self.assertEqual(self.ctrl.state, Idle())
        self.assertIsNone(self.ctrl.result_url)

    async def test_forced_generation_supersedes_pending_one(self):
        results = iter(["T0xE", "TkVX"])
        gates = [asyncio.Event(), asyncio.Event()]

        async def generator(prompt, image):
            gate = gates.pop(0)
            value = next(results)
            await gate.wait()
            return value

        first_gate, second_gate = gates
        ctrl = PosterController(generator=generator, prompt=TEST_PROMPT)
        ctrl.select_image(make_selected())

        old = asyncio.create_task(ctrl.generate())
        await asyncio.sleep(0)
        new = asyncio.create_task(ctrl.generate(force=True))
        await asyncio.sleep(0)

        second_gate.set()
        await new
        first_gate.set()
        await old

        self.assertEqual(ctrl.state, Result("data:image/png;base64,TkVX"))


class TestTwoPhaseGenerate(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.generator = AsyncMock(return_value="QUJD")
        self.ctrl = PosterController(generator=self.generator, prompt=TEST_PROMPT)
        self.ctrl.select_image(make_selected())

    async def test_begin_disables_trigger_before_any_call(self):
        request_id = self.ctrl.begin()
        self.assertIsNotNone(request_id)
        self.assertEqual(self.ctrl.state, Loading(request_id))
        self.assertFalse(self.ctrl.can_generate)
        self.assertTrue(self.ctrl.has_pending)
        self.generator.assert_not_awaited()

    async def test_second_click_before_run_is_ignored(self):
        first = self.ctrl.begin()
        self.assertIsNone(self.ctrl.begin())
        self.assertEqual(self.ctrl.state, Loading(first))

        await self.ctrl.run_pending()
        await self.ctrl.run_pending()
        self.assertEqual(self.generator.await_count, 1)
        self.assertEqual(self.ctrl.state, Result("data:image/png;base64,QUJD"))

    async def test_run_pending_uses_inputs_captured_at_click(self):
        self.ctrl.begin()
        self.ctrl.set_prompt("edited later")
        await self.ctrl.run_pending()
        prompt, _ = self.generator.await_args.args
        self.assertEqual(prompt, TEST_PROMPT)

    async def test_new_selection_drops_pending_request(self):
        self.ctrl.begin()
        self.ctrl.select_image(make_selected(b"NEW"))
        self.assertFalse(self.ctrl.has_pending)
        await self.ctrl.run_pending()
        self.generator.assert_not_awaited()
        self.assertEqual(self.ctrl.state, Idle())

    async def test_validation_failure_leaves_nothing_pending(self):
        self.ctrl.set_prompt("  ")
        self.assertIsNone(self.ctrl.begin())
        self.assertEqual(self.ctrl.state, Error(VALIDATION_MESSAGE))
        self.assertFalse(self.ctrl.has_pending)


class TestLoadUpload(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.ctrl = PosterController(generator=AsyncMock(), prompt=TEST_PROMPT)

    async def test_upload_sets_preview(self):
        state = await self.ctrl.load_upload(FakeUpload(b"ABC"))
        self.assertEqual(state, Idle())
        self.assertEqual(self.ctrl.image.preview_url, "data:image/jpeg;base64,QUJD")
        self.assertTrue(self.ctrl.can_generate)

    async def test_unreadable_upload_shows_read_error(self):
        await self.ctrl.load_upload(FakeUpload(b"ABC"))
        state = await self.ctrl.load_upload(FakeUpload(b""))
        self.assertEqual(state, Error(READ_ERROR_MESSAGE))
        self.assertIsNone(self.ctrl.image)
        self.assertFalse(self.ctrl.can_generate)

    async def test_cleared_uploader_removes_image(self):
        await self.ctrl.load_upload(FakeUpload(b"ABC"))
        self.ctrl.state = Result("data:image/png;base64,QUJD")
        state = await self.ctrl.load_upload(None)
        self.assertEqual(state, Idle())
        self.assertIsNone(self.ctrl.image)
        self.assertFalse(self.ctrl.can_generate)


class TestShareFromController(unittest.TestCase):

    def test_share_without_result_is_unsupported_and_keeps_state(self):
        ctrl = PosterController(generator=AsyncMock())
        ctrl.state = Error("previous error")
        self.assertEqual(ctrl.share(target=None), ShareOutcome.UNSUPPORTED)
        self.assertEqual(ctrl.notice, UNSUPPORTED_MESSAGE)
        self.assertEqual(ctrl.state, Error("previous error"))


if __name__ == "__main__":
    unittest.main()
