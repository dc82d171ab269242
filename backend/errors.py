# backend/errors.py

VALIDATION_MESSAGE = "Please upload an image and provide a prompt."
READ_ERROR_MESSAGE = "Could not read the selected image."
MISSING_KEY_MESSAGE = "API_KEY environment variable is not set."
API_ERROR_MESSAGE = "Failed to generate poster due to an API error."
EMPTY_RESULT_MESSAGE = "The API did not return an image. Please try again."


class PosterError(Exception):
    """Lỗi gốc; message luôn an toàn để hiển thị cho user."""


class InputValidationError(PosterError):
    def __init__(self, message: str = VALIDATION_MESSAGE):
        super().__init__(message)


class ImageReadError(PosterError):
    def __init__(self, message: str = READ_ERROR_MESSAGE):
        super().__init__(message)


class ConfigurationError(PosterError):
    def __init__(self, message: str = MISSING_KEY_MESSAGE):
        super().__init__(message)


class GenerationError(PosterError):
    def __init__(self, message: str = API_ERROR_MESSAGE):
        super().__init__(message)
