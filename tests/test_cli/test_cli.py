"""Tests for the statusfeed CLI."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import httpx
import pytest
import respx
from click.testing import CliRunner

from statusfeed.cli import describe_error, main, render_status
from statusfeed.timeline.errors import ServiceError, TransportFailure


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def settings_patch(test_settings):
    with patch("statusfeed.cli.get_settings", return_value=test_settings) as mock:
        yield mock


class TestTimelineCommand:
    """Test the `timeline` command."""

    @respx.mock
    def test_prints_merged_feed(self, runner, settings_patch, urls, make_wire_status, at):
        respx.get(urls["friends"]).mock(
            return_value=httpx.Response(
                200,
                json=[
                    make_wire_status(2, at(10, 2), text="second", screen_name="bob"),
                    make_wire_status(1, at(10, 0), text="first", screen_name="carol"),
                ],
            )
        )
        respx.get(urls["replies"]).mock(
            return_value=httpx.Response(
                200,
                json=[make_wire_status(3, at(10, 3), text="@alice hi", screen_name="dave")],
            )
        )

        result = runner.invoke(main, ["timeline"])

        assert result.exit_code == 0, result.output
        lines = [
            line for line in result.output.splitlines()
            if line.startswith(("dave:", "bob:", "carol:"))
        ]
        assert [line.split(":")[0] for line in lines] == ["dave", "bob", "carol"]
        assert "@alice hi" in lines[0]

    @respx.mock
    def test_no_replies(self, runner, settings_patch, urls, make_wire_status, at):
        friends = respx.get(urls["friends"]).mock(
            return_value=httpx.Response(200, json=[make_wire_status(1, at(10, 0))])
        )
        replies = respx.get(urls["replies"]).mock(return_value=httpx.Response(200, json=[]))

        result = runner.invoke(main, ["timeline", "--no-replies"])

        assert result.exit_code == 0, result.output
        assert friends.called
        assert not replies.called

    @respx.mock
    def test_empty_feed(self, runner, settings_patch, urls):
        respx.get(urls["friends"]).mock(return_value=httpx.Response(200, json=[]))

        result = runner.invoke(main, ["timeline", "--no-replies"])

        assert result.exit_code == 0, result.output
        assert "No statuses." in result.output

    @respx.mock
    def test_service_error_shown(self, runner, settings_patch, urls, make_wire_status, at):
        respx.get(urls["friends"]).mock(
            return_value=httpx.Response(200, json=[make_wire_status(1, at(10, 0), text="partial")])
        )
        respx.get(urls["replies"]).mock(
            return_value=httpx.Response(401, json={"error": "Could not authenticate you."})
        )

        result = runner.invoke(main, ["timeline"])

        assert result.exit_code == 1
        assert "Could not authenticate you." in result.output
        assert "partial" not in result.output

    @respx.mock
    def test_transport_failure_generic_message(self, runner, settings_patch, urls):
        respx.get(urls["friends"]).mock(side_effect=httpx.ConnectError("refused"))

        result = runner.invoke(main, ["timeline"])

        assert result.exit_code == 1
        assert "failed to fetch timeline" in result.output


class TestPostCommand:
    """Test the `post` command."""

    @respx.mock
    def test_post(self, runner, settings_patch, urls, make_wire_status, at):
        route = respx.post(urls["update"]).mock(
            return_value=httpx.Response(200, json=make_wire_status(777, at(12, 0)))
        )

        result = runner.invoke(main, ["post", "hello world", "--reply-to", "42"])

        assert result.exit_code == 0, result.output
        assert "Posted status 777." in result.output
        body = route.calls.last.request.content.decode()
        assert "in_reply_to_status_id=42" in body
        assert "source=statusfeed" in body

    @respx.mock
    def test_too_long_rejected_locally(self, runner, settings_patch, urls):
        route = respx.post(urls["update"]).mock(return_value=httpx.Response(200, json={}))

        result = runner.invoke(main, ["post", "x" * 141])

        assert result.exit_code == 2
        assert "limit is 140" in result.output
        assert not route.called

    @respx.mock
    def test_service_rejects(self, runner, settings_patch, urls):
        respx.post(urls["update"]).mock(
            return_value=httpx.Response(403, json={"error": "Status is a duplicate."})
        )

        result = runner.invoke(main, ["post", "hello again"])

        assert result.exit_code == 1
        assert "Status is a duplicate." in result.output


class TestConfigCommand:
    def test_hides_password(self, runner, settings_patch):
        result = runner.invoke(main, ["config"])

        assert result.exit_code == 0, result.output
        assert "api_username: alice" in result.output
        assert "secret" not in result.output
        assert "credentials_configured: True" in result.output
        assert "friends_timeline_url: https://api.example.com/statuses/friends_timeline.json" in result.output


class TestRendering:
    NOW = datetime(2008, 8, 27, 10, 5, tzinfo=timezone.utc)

    def test_render_relative(self, make_status):
        status = make_status(1, 10, 0, text="hello", screen_name="bob")

        assert render_status(status, self.NOW) == "bob: hello (about 5 minutes ago)"

    def test_render_absolute(self, make_status):
        status = make_status(1, 10, 0, text="hello", screen_name="bob")

        line = render_status(status, self.NOW, relative=False)

        assert line == "bob: hello (Aug 27, 2008 at 10:00)"

    def test_render_other_timezone(self, make_status):
        status = make_status(1, 10, 0, text="hello", screen_name="bob")
        now = self.NOW.astimezone(timezone(timedelta(hours=2)))

        assert render_status(status, now, relative=False) == "bob: hello (Aug 27, 2008 at 12:00)"

    def test_describe_service_error(self):
        assert describe_error(ServiceError("Rate limit exceeded"), "fetch timeline") == "Error: Rate limit exceeded"

    def test_describe_other_error(self):
        error = TransportFailure("boom")
        assert describe_error(error, "fetch timeline") == "Error: failed to fetch timeline."
