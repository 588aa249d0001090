"""Error types raised by the study assistant core."""


class StudyAssistantError(Exception):
    """Base class for all service errors."""


class NotFoundError(StudyAssistantError):
    """A keyed lookup found nothing."""

    def __init__(self, entity: str, key: str):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class NoTextAvailableError(StudyAssistantError):
    """No processed document in the study set has usable text."""

    def __init__(self, message: str = "No processed documents with extracted text found. Please process documents first."):
        super().__init__(message)


class RateLimitExceededError(StudyAssistantError):
    """The daily token budget is spent."""

    def __init__(self, used: int, limit: int):
        self.used = used
        self.limit = limit
        super().__init__(
            f"Daily token limit exceeded. Used: {used:,}/{limit:,} tokens. "
            "Please try again tomorrow."
        )


class ProviderError(StudyAssistantError):
    """A single provider call failed; the gateway may try another provider."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ProviderUnavailableError(StudyAssistantError):
    """No configured provider could serve the request."""


class MalformedResponseError(StudyAssistantError):
    """The provider reply could not be parsed into the requested structure."""


class RenderError(StudyAssistantError):
    """Composing the output document failed."""
