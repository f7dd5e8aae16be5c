"""Error taxonomy for the session composer and its stores."""


class LessicoError(Exception):
    """Base class for all lessico errors."""


class GenerationFailed(LessicoError):
    """The word generator failed or returned fewer pairs than requested."""

    def __init__(self, message: str, requested: int | None = None, received: int | None = None):
        super().__init__(message)
        self.requested = requested
        self.received = received


class GeneratorUnavailable(LessicoError):
    """The recommender could not rank the review candidates."""


class NotFound(LessicoError):
    """A mastery record, dictionary entry or stored payload does not exist."""


class CorruptRecord(NotFound):
    """A stored payload failed schema validation on read."""

    def __init__(self, key: str, detail: str = ''):
        super().__init__(f"Stored value for '{key}' is invalid: {detail}" if detail
                         else f"Stored value for '{key}' is invalid")
        self.key = key


class StorageError(LessicoError):
    """The key-value backend failed to read or write."""
