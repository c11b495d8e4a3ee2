"""
Error taxonomy for timeline fetching and posting.

Every error here is terminal for the fetch job that raised it. Callers
recover at the job boundary (TimelineFetcher's on_error callback or the
exception raised by fetch_timeline) and decide how to present it.
"""


class FeedError(Exception):
    """Base exception for timeline fetch and post failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedTimestamp(FeedError, ValueError):
    """Raised when a status created_at does not match the wire format."""

    def __init__(self, raw: str, reason: str = "does not match the expected format"):
        super().__init__(f"Malformed timestamp {raw!r}: {reason}")
        self.raw = raw


class TransportFailure(FeedError):
    """
    Raised on network or protocol failure for a source request.

    Covers DNS/connect/timeout/read errors, HTTP error statuses without a
    decodable error payload, and response bodies that are not the
    expected JSON shape.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class ServiceError(FeedError):
    """Raised when the remote service answers with an application-level error object."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class StatusTooLong(FeedError, ValueError):
    """Raised before posting when status text exceeds the configured limit."""

    def __init__(self, length: int, limit: int):
        super().__init__(f"Status is {length} characters, limit is {limit}")
        self.length = length
        self.limit = limit
