class ContentForgeError(Exception):
    """Base class for errors raised by content-forge."""


class ConfigError(ContentForgeError):
    """A required credential or endpoint is not configured."""


class StoreError(ContentForgeError):
    """Profile store lookup or write failed for a reason other than not-found."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class QuotaExceededError(ContentForgeError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Generation limit reached. Please upgrade to Pro ({limit} max).")
        self.limit = limit


class EmptyResponseError(ContentForgeError):
    """The generation API answered without any text."""


class PipelineError(ContentForgeError):
    """A document build step failed; no partial document is produced."""

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__(str(cause) or cause.__class__.__name__)
        self.stage = stage
        self.cause = cause
