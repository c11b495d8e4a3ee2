"""Timeline core - status model, timestamps, deduplication and merging."""

from statusfeed.timeline.errors import (
    FeedError,
    MalformedTimestamp,
    ServiceError,
    StatusTooLong,
    TransportFailure,
)
from statusfeed.timeline.merge import merge, merge_into, remove_duplicates
from statusfeed.timeline.schemas import PostRequest, ServiceErrorPayload, Status
from statusfeed.timeline.timestamps import format_relative, parse_timestamp

__all__ = [
    "FeedError",
    "MalformedTimestamp",
    "ServiceError",
    "StatusTooLong",
    "TransportFailure",
    "Status",
    "ServiceErrorPayload",
    "PostRequest",
    "parse_timestamp",
    "format_relative",
    "remove_duplicates",
    "merge",
    "merge_into",
]
