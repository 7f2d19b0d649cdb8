"""Exceptions raised by the weather retrieval layer."""
from typing import Optional


class WeatherError(Exception):
    """Base class for weather retrieval failures."""
    pass


class TransportError(WeatherError):
    """The request failed before any response was received."""
    pass


class ParseError(WeatherError):
    """The response body was not a well-formed JSON object."""
    pass


class ProviderError(WeatherError):
    """The provider answered with a non-2xx status."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        super().__init__(self.reason)

    @property
    def reason(self) -> str:
        """Provider message when present, otherwise the status code."""
        if self.message:
            return self.message
        return str(self.status_code)


class RequestFailed(WeatherError):
    """Raised once the retry budget is exhausted."""

    def __init__(self, attempts: int, last_error: Exception):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Request failed after {attempts} attempts: {self.reason}")

    @property
    def reason(self) -> str:
        return getattr(self.last_error, "reason", None) or str(self.last_error)


class MalformedResponse(WeatherError):
    """A successful response lacked a required field. Never retried."""

    def __init__(self, field: str, detail: str = "missing"):
        self.field = field
        self.detail = detail
        super().__init__(f"Malformed provider response: '{field}' {detail}")


def describe_error(exc: Exception) -> str:
    """Turn a retrieval failure into a message fit for the user."""
    if isinstance(exc, MalformedResponse):
        return "Received unexpected data from the weather provider."
    if isinstance(exc, RequestFailed):
        exc = exc.last_error
    if isinstance(exc, ProviderError):
        return f"The weather provider reported an error: {exc.reason}"
    if isinstance(exc, TransportError):
        return "Network problem: could not reach the weather provider."
    if isinstance(exc, ParseError):
        return "The weather provider sent a response that could not be read."
    return str(exc) or exc.__class__.__name__
