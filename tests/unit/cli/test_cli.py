"""
Unit Tests for the appcraft CLI
"""
import json
from unittest.mock import patch

import pytest
from rich.console import Console

from appcraft.cli.main import (
    build_proxy_request,
    create_parser,
    main,
    parse_body,
    parse_headers,
    run_fetch,
)

from mocks.mock_upstream import response


@pytest.fixture
def console() -> Console:
    return Console(record=True, width=120, force_terminal=False)


class TestParsing:
    """Argument and header parsing"""

    def test_fetch_defaults(self):
        args = create_parser().parse_args(["fetch", "/posts/1"])

        assert args.command == "fetch"
        assert args.method == "GET"
        assert args.headers == []
        assert args.timeout is None
        assert args.retries is None

    def test_method_uppercased(self):
        args = create_parser().parse_args(["fetch", "/x", "-X", "post"])
        assert args.method == "POST"

    def test_invalid_method_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["fetch", "/x", "-X", "TRACE"])

    def test_parse_headers(self):
        assert parse_headers(["Authorization: Bearer a:b", "X-Empty:"]) == {
            "Authorization": "Bearer a:b",
            "X-Empty": "",
        }

    def test_parse_headers_invalid(self):
        with pytest.raises(ValueError):
            parse_headers(["no-colon"])

    def test_parse_body(self):
        assert parse_body('{"a": 1}') == {"a": 1}
        assert parse_body("a=1&b=2") == "a=1&b=2"
        assert parse_body(None) is None

    def test_build_proxy_request(self):
        args = create_parser().parse_args([
            "fetch", "/items", "-X", "PUT", "-H", "X-Key: 1", "-d", '{"n": 2}',
            "--timeout", "5000", "--retries", "0",
        ])

        assert build_proxy_request(args) == {
            "url": "/items",
            "method": "PUT",
            "headers": {"X-Key": "1"},
            "body": {"n": 2},
            "timeoutMs": 5000,
            "maxRetries": 0,
        }


class TestRunFetch:
    """fetch command against a scripted upstream"""

    @pytest.mark.asyncio
    async def test_success(self, console, upstream):
        upstream.json("GET", "/posts/1", {"id": 1, "title": "foo"})
        args = create_parser().parse_args(["fetch", "https://api.test/posts/1"])

        exit_code = await run_fetch(args, console, transport=upstream.transport)

        assert exit_code == 0
        output = console.export_text()
        assert "200 OK" in output
        assert '"title": "foo"' in output

    @pytest.mark.asyncio
    async def test_raw_output(self, console, upstream):
        upstream.json("GET", "/posts/1", {"id": 1})
        args = create_parser().parse_args(["fetch", "https://api.test/posts/1", "--raw"])

        await run_fetch(args, console, transport=upstream.transport)

        data = json.loads(console.export_text())
        assert data["data"] == {"id": 1}
        assert data["success"] is True

    @pytest.mark.asyncio
    async def test_client_error_exit_code(self, console, upstream):
        upstream.add("GET", "/missing", response(404, {"error": "nope"}))
        args = create_parser().parse_args(["fetch", "https://api.test/missing"])

        assert await run_fetch(args, console, transport=upstream.transport) == 1

    @pytest.mark.asyncio
    async def test_validation_failure(self, console, upstream):
        args = create_parser().parse_args(["fetch", "https://"])

        exit_code = await run_fetch(args, console, transport=upstream.transport)

        assert exit_code == 1
        assert "InvalidUrlError" in console.export_text()
        assert upstream.call_count == 0


class TestMain:
    """Entry point dispatch"""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "appcraft" in capsys.readouterr().out

    def test_serve_runs_uvicorn(self):
        with patch("uvicorn.run") as mock_run:
            assert main(["serve", "--port", "9001"]) == 0

        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs["port"] == 9001
        assert mock_run.call_args.args[0] == "appcraft.main:app"

    def test_bad_header_exit_code(self):
        assert main(["fetch", "/x", "-H", "broken"]) == 2
