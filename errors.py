class PromptStudioError(Exception):
    """Base error. ``str(err)`` is the message shown to the user."""


class ValidationError(PromptStudioError):
    pass


class GenerationFailed(PromptStudioError):
    pass


class TranslationFailed(PromptStudioError):
    pass


class ClipboardError(PromptStudioError):
    pass


class ResponseFormatError(ValueError):
    """
    Raised when the model reply cannot be parsed into the four prompt fields.
    """

    def __init__(self, message: str, raw_response: str | None):
        super().__init__(message)
        self.raw_response = raw_response
