"""Error taxonomy shared by the relay, the REST endpoints and the Python client.

Every error carries the HTTP status it is surfaced with; the application turns
them into ``{"error": message}`` JSON responses.
"""


class GenShaiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(GenShaiError):
    status_code = 400


class ConfigurationError(GenShaiError):
    """Missing upstream credentials. Not retryable by the caller."""


class PersistenceError(GenShaiError):
    """The conversation store could not be read or written."""


class UpstreamError(GenShaiError):
    pass


class UpstreamRateLimited(UpstreamError):
    """The gateway asked us to slow down. Safe to retry after a delay."""

    status_code = 429


class UpstreamQuotaExhausted(UpstreamError):
    """Gateway credits are used up. Retrying will not help until an operator tops up."""

    status_code = 402


class UpstreamTransportError(UpstreamError):
    pass


_BY_STATUS: dict[int, type[GenShaiError]] = {
    400: BadRequestError,
    402: UpstreamQuotaExhausted,
    429: UpstreamRateLimited,
}


def error_for_status(status_code: int, message: str) -> GenShaiError:
    """Rebuild the error class a response status stands for."""
    return _BY_STATUS.get(status_code, UpstreamTransportError)(message)
