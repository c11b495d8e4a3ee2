"""Services that orchestrate timeline fetching."""

from statusfeed.services.timeline_service import (
    FetchJob,
    FetchState,
    TimelineFetcher,
    timeline_sources,
)

__all__ = ["FetchJob", "FetchState", "TimelineFetcher", "timeline_sources"]
