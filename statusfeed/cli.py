"""
Command-line interface for statusfeed.

Fetches the merged timeline, posts new statuses, and shows the
effective configuration.

Usage:
    statusfeed timeline              # Friends timeline merged with replies
    statusfeed timeline --no-replies # Friends timeline only
    statusfeed post "hello world"    # Post a new status
    statusfeed post "@bob sure" --reply-to 1234
    statusfeed config                # Show effective settings
"""

import asyncio
import os
import sys
from datetime import datetime, timezone

import click
import structlog

from statusfeed.config.settings import Settings, get_settings
from statusfeed.ingestion.http_client import Credential, HTTPClient
from statusfeed.ingestion.status_client import StatusClient
from statusfeed.observability.logging import bind_context, setup_logging
from statusfeed.observability.metrics import get_metrics
from statusfeed.services.timeline_service import (
    FetchJob,
    FetchState,
    TimelineFetcher,
    timeline_sources,
)
from statusfeed.timeline.errors import FeedError, ServiceError
from statusfeed.timeline.schemas import Status
from statusfeed.timeline.timestamps import format_absolute, format_relative

logger = structlog.get_logger(__name__)


def _http_client(settings: Settings) -> HTTPClient:
    credential = Credential.from_values(settings.api_username, settings.api_password)
    if credential is None:
        logger.warning("No credential configured, requests are sent unauthenticated")
    return HTTPClient(
        credential=credential,
        timeout=settings.request_timeout_seconds,
        user_agent=settings.user_agent,
    )


def render_status(
    status: Status,
    now: datetime,
    relative: bool = True,
    clock_24h: bool = True,
) -> str:
    """Render one status as a single line of plain text."""
    posted = status.posted_at
    if relative:
        when = format_relative(posted, now=now, clock_24h=clock_24h)
    else:
        when = format_absolute(posted.astimezone(now.tzinfo), clock_24h=clock_24h)
    return f"{status.author_screen_name}: {status.text} ({when})"


def describe_error(error: FeedError, action: str) -> str:
    """User-facing message: the service's own message when there is one."""
    if isinstance(error, ServiceError) and error.message:
        return f"Error: {error.message}"
    return f"Error: failed to {action}."


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """statusfeed - merged status timelines from the command line."""
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command()
@click.option(
    "--replies/--no-replies",
    default=None,
    help="Merge the replies feed into the timeline (default from settings)",
)
@click.option("--absolute", is_flag=True, help="Show absolute times instead of relative")
@click.option("--metrics/--no-metrics", default=False, help="Enable metrics server")
def timeline(replies: bool | None, absolute: bool, metrics: bool) -> None:
    """Fetch and print the merged timeline."""
    settings = get_settings()
    bind_context(command="timeline")

    if metrics:
        get_metrics().start_server()

    relative = settings.relative_times and not absolute

    def render(feed: list[Status]) -> None:
        if not feed:
            click.echo("No statuses.")
            return
        now = datetime.now(timezone.utc).astimezone()
        for status in feed:
            click.echo(render_status(status, now, relative, settings.clock_24h))

    def report(error: FeedError) -> None:
        click.echo(click.style(describe_error(error, "fetch timeline"), fg="red"), err=True)

    async def run() -> FetchJob:
        async with _http_client(settings) as http:
            fetcher = TimelineFetcher(StatusClient(http), on_feed=render, on_error=report)
            job = FetchJob.for_sources(timeline_sources(settings, replies))
            return await fetcher.run(job)

    job = asyncio.run(run())

    if job.state is not FetchState.DONE:
        sys.exit(1)


@main.command()
@click.argument("text")
@click.option("--reply-to", default=None, help="Id of the status being replied to")
def post(text: str, reply_to: str | None) -> None:
    """Post a new status."""
    settings = get_settings()
    bind_context(command="post")

    async def run() -> Status:
        async with _http_client(settings) as http:
            client = StatusClient(
                http,
                update_url=settings.update_url,
                source_label=settings.source_label,
                max_length=settings.status_max_length,
            )
            request = client.build_post(text, in_reply_to_status_id=reply_to)
            return await client.post_status(request)

    try:
        status = asyncio.run(run())
    except ValueError as e:
        # Rejected locally (too long or empty), nothing was sent
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(2)
    except FeedError as e:
        logger.error("Post failed", error=e.message, error_type=type(e).__name__)
        click.echo(click.style(describe_error(e, "post status"), fg="red"), err=True)
        sys.exit(1)

    click.echo(f"Posted status {status.id}.")


@main.command("config")
def show_config() -> None:
    """Show the effective settings (secrets hidden)."""
    settings = get_settings()

    click.echo("\nstatusfeed settings:")
    click.echo("-" * 40)
    for name, value in settings.model_dump(exclude={"api_password"}).items():
        click.echo(f"  {name}: {value}")
    click.echo(f"  credentials_configured: {settings.credentials_configured}")
    click.echo(f"  friends_timeline_url: {settings.friends_timeline_url}")
    click.echo(f"  replies_url: {settings.replies_url}")
    click.echo(f"  update_url: {settings.update_url}")
    click.echo("-" * 40)


if __name__ == "__main__":
    main()
