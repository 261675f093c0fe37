"""Error taxonomy for netkit and the HTTP status classifier."""

from __future__ import annotations


class NetworkError(Exception):
    """
    Base class for every failure surfaced by NetworkClient.

    Callers receive exactly one NetworkError subclass per failed call.
    `is_retryable` is advisory only: netkit never retries on its own.

    Example:
        try:
            user = await client.execute(GetUser(user_id=1))
        except NetworkError as e:
            if e.is_retryable:
                schedule_retry()
            print(e.description)
    """

    default_message = "Unknown error occurred"
    retryable = False

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def description(self) -> str:
        """Human-readable description of the failure."""
        return str(self)

    @property
    def status_code(self) -> int | None:
        """HTTP status code, for status-based errors only."""
        return None

    @property
    def is_retryable(self) -> bool:
        """True only for server errors and transport failures."""
        return self.retryable


class InvalidURLError(NetworkError):
    """The base URL and path did not form a valid URL."""

    default_message = "Invalid URL"

    def __init__(self, url: str | None = None) -> None:
        self.url = url
        super().__init__(f"Invalid URL: {url}" if url else None)


class InvalidResponseError(NetworkError):
    """The transport produced something that is not a well-formed HTTP response."""

    default_message = "Invalid response from server"


class HTTPStatusError(NetworkError):
    """Base for errors derived from a non-2xx HTTP status."""

    def __init__(self, status_code: int, url: str | None = None, message: str | None = None) -> None:
        self._status_code = status_code
        self.url = url
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return self._status_code


class UnauthorizedError(HTTPStatusError):
    default_message = "Unauthorized access"

    def __init__(self, url: str | None = None) -> None:
        super().__init__(401, url)


class ForbiddenError(HTTPStatusError):
    default_message = "Access forbidden"

    def __init__(self, url: str | None = None) -> None:
        super().__init__(403, url)


class NotFoundError(HTTPStatusError):
    default_message = "Resource not found"

    def __init__(self, url: str | None = None) -> None:
        super().__init__(404, url)


class ClientError(HTTPStatusError):
    """Any 4xx status other than 401, 403 and 404."""

    def __init__(self, status_code: int, url: str | None = None) -> None:
        super().__init__(status_code, url, f"Client error with status code: {status_code}")


class ServerError(HTTPStatusError):
    """5xx status, or any status outside the ranges handled elsewhere."""

    retryable = True

    def __init__(self, status_code: int, url: str | None = None) -> None:
        super().__init__(status_code, url, f"Server error with status code: {status_code}")


class _CausedError(NetworkError):
    prefix = ""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"{self.prefix}: {cause}")


class DecodingError(_CausedError):
    """The response body could not be decoded into the declared type."""

    prefix = "Failed to decode response"


class EncodingError(_CausedError):
    """The request body or query could not be encoded."""

    prefix = "Failed to encode request"


class TransportError(_CausedError):
    """DNS, connection, timeout or other transport-level failure."""

    prefix = "Network error"
    retryable = True


class UnknownNetworkError(NetworkError):
    default_message = "Unknown error occurred"


def classify_status(status_code: int, url: str | None = None) -> NetworkError | None:
    """
    Map an HTTP status code to the error it represents.

    Args:
        status_code: Status code of a received response
        url: Optional URL attached to the resulting error for context

    Returns:
        None for 2xx, otherwise the matching NetworkError (not raised)
    """
    if 200 <= status_code <= 299:
        return None
    if status_code == 401:
        return UnauthorizedError(url)
    if status_code == 403:
        return ForbiddenError(url)
    if status_code == 404:
        return NotFoundError(url)
    if 400 <= status_code <= 499:
        return ClientError(status_code, url)
    # 5xx and anything unexpected (1xx, unresolved 3xx)
    return ServerError(status_code, url)


def raise_for_status(status_code: int, url: str | None = None) -> None:
    """Raise the classified error for a non-2xx status code."""
    error = classify_status(status_code, url)
    if error is not None:
        raise error
