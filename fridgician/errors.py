class FridgicianError(Exception):
    pass


class ValidationError(FridgicianError):
    """User input is not enough to act on. Raised before any network call."""


class GenerationFailure(FridgicianError):
    """The text model call failed. Nothing from the batch is kept."""

    default_message = "Could not generate recipes. The AI may be busy, please try again later."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.default_message if message is None else message)


class ImageUnavailable(FridgicianError):
    """No photo for one recipe. The recipe is kept without one."""


class PersistenceCorruption(FridgicianError):
    """The stored collection could not be read back."""
