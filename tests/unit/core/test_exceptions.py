"""Unit tests for study_assistant/core/exceptions.py and HTTP error mapping."""
from study_assistant.core.exceptions import (
    MalformedResponseError,
    NoTextAvailableError,
    NotFoundError,
    ProviderError,
    ProviderUnavailableError,
    RateLimitExceededError,
    RenderError,
)
from study_assistant.routers.generation import to_http_error


class TestErrorMessages:
    """Tests for error messages."""

    def test_rate_limit_message(self):
        """Should format usage with thousands separators."""
        error = RateLimitExceededError(1_250_000, 1_000_000)

        assert str(error) == (
            "Daily token limit exceeded. Used: 1,250,000/1,000,000 tokens. Please try again tomorrow."
        )

    def test_not_found_and_provider_messages(self):
        """Should name the entity and provider."""
        assert str(NotFoundError("Document", "d1")) == "Document not found: d1"
        assert str(ProviderError("gemini", "HTTP 500")) == "gemini: HTTP 500"


class TestHttpMapping:
    """Tests for to_http_error."""

    def test_status_codes(self):
        """Should map each error type to its HTTP status."""
        cases = [
            (NotFoundError("StudySet", "s1"), 404),
            (NoTextAvailableError(), 400),
            (RateLimitExceededError(1, 1), 429),
            (MalformedResponseError("bad"), 502),
            (ProviderUnavailableError("none"), 503),
            (RenderError("boom"), 500),
        ]

        assert [to_http_error(error).status_code for error, _ in cases] == [code for _, code in cases]
