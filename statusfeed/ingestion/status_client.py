"""
Status service client.

Fetches a status collection from a feed URL and posts new statuses.
Responses are decoded here into the timeline model:

- A JSON array decodes to a feed (list[Status]); every created_at is
  parsed while decoding so a bad timestamp fails the round immediately.
- A JSON object with an "error" string decodes to ServiceError, whether
  it came with a 2xx or an error status.
- Anything else is a protocol failure, reported as TransportFailure.
"""

import json
import logging
from typing import Any

import httpx

from statusfeed.ingestion.http_client import HTTPClient
from statusfeed.timeline.errors import ServiceError, StatusTooLong, TransportFailure
from statusfeed.timeline.schemas import PostRequest, ServiceErrorPayload, Status

logger = logging.getLogger(__name__)


class StatusClient:
    """
    Client for feed-source and update endpoints.

    The HTTPClient session is owned by the caller, so a fetch job can reuse
    one connection pool for all of its sources.

    Example:
        async with HTTPClient(credential=credential) as http:
            client = StatusClient(http)
            feed = await client.fetch_feed(settings.friends_timeline_url)
    """

    def __init__(
        self,
        http: HTTPClient,
        update_url: str | None = None,
        source_label: str = "statusfeed",
        max_length: int = 140,
    ):
        """
        Initialize status client.

        Args:
            http: Open HTTPClient session
            update_url: Endpoint for posting new statuses
            source_label: Client label sent with each post
            max_length: Maximum status length accepted for posting
        """
        self._http = http
        self._update_url = update_url
        self._source_label = source_label
        self._max_length = max_length

    async def fetch_feed(self, url: str) -> list[Status]:
        """
        Fetch one source and decode it into a feed.

        Args:
            url: Feed source URL

        Returns:
            Statuses in the order the source returned them (newest first)

        Raises:
            TransportFailure: On network/protocol failure
            ServiceError: If the service returned an error object
            MalformedTimestamp: If any status has an unparsable created_at
        """
        body = await self._request_json(self._http.get, url)

        if not isinstance(body, list):
            raise TransportFailure(
                f"Expected a status collection from {url}, got {type(body).__name__}",
                url=url,
            )

        feed = [self._decode_status(item, url) for item in body]

        # Fail the round now rather than during a later comparison
        for status in feed:
            status.posted_at

        logger.debug(f"Decoded {len(feed)} statuses from {url}")
        return feed

    def build_post(
        self,
        text: str,
        in_reply_to_status_id: str | int | None = None,
    ) -> PostRequest:
        """
        Build a post payload for text, enforcing the length limit.

        Raises:
            StatusTooLong: If text exceeds the configured maximum length
            ValueError: If text is empty
        """
        text = text.strip()
        if len(text) > self._max_length:
            raise StatusTooLong(len(text), self._max_length)
        if not text:
            raise ValueError("Status text must not be empty")
        return PostRequest(
            status=text,
            source=self._source_label,
            in_reply_to_status_id=in_reply_to_status_id,
        )

    async def post_status(self, request: PostRequest) -> Status:
        """
        Publish a new status.

        Args:
            request: Payload built by build_post()

        Returns:
            The created status as echoed by the service

        Raises:
            TransportFailure: On network/protocol failure
            ServiceError: If the service rejected the post
        """
        if not self._update_url:
            raise RuntimeError("StatusClient was created without an update_url")

        url = self._update_url
        body = await self._request_json(self._http.post, url, request.to_form())
        status = self._decode_status(body, url)

        if request.in_reply_to_status_id:
            logger.info(f"Posted status {status.id} in reply to {request.in_reply_to_status_id}")
        else:
            logger.info(f"Posted status {status.id}")
        return status

    async def _request_json(self, send, url: str, *args: Any) -> Any:
        """Issue a request and decode its JSON body, mapping error payloads."""
        try:
            response: httpx.Response = await send(url, *args)
        except TransportFailure as e:
            # Error statuses may still carry a service error object
            error = self._decode_error(e.response_body)
            if error is not None:
                raise ServiceError(error.error, url=url, status_code=e.status_code) from e
            raise

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TransportFailure(
                f"Response from {url} is not valid JSON",
                url=url,
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        error = ServiceErrorPayload.from_body(body)
        if error is not None:
            raise ServiceError(error.error, url=url, status_code=response.status_code)

        return body

    @staticmethod
    def _decode_error(text: str | None) -> ServiceErrorPayload | None:
        if not text:
            return None
        try:
            return ServiceErrorPayload.from_body(json.loads(text))
        except json.JSONDecodeError:
            return None

    @staticmethod
    def _decode_status(item: Any, url: str) -> Status:
        if not isinstance(item, dict):
            raise TransportFailure(
                f"Expected a status object from {url}, got {type(item).__name__}",
                url=url,
            )
        try:
            return Status.from_wire(item)
        except (KeyError, ValueError) as e:
            raise TransportFailure(
                f"Malformed status object from {url}: {e}",
                url=url,
            ) from e
