"""
Tests for the URL processing service.

Tests cover:
- derive_title / truncate_summary / favicon_url_for / build_reader_url: pure derivation rules
- fetch_extracted_text: Jina AI reader calls with mocked responses (success, errors, retries)
- process_url: validation order and the assembled result
"""
import logging

import httpx
import pytest
import respx

from core.config import Settings
from services.exceptions import (
    InvalidUrlError,
    MisconfigurationError,
    MissingInputError,
    UpstreamFailureError,
)
from services.url_processor import (
    UNTITLED,
    build_reader_url,
    derive_title,
    favicon_url_for,
    fetch_extracted_text,
    parse_hostname,
    process_url,
    truncate_summary,
)
from tests.conftest import JINA_READER_URL, TEST_JINA_KEY


class TestDeriveTitle:
    """Tests for derive_title."""

    def test__derive_title__first_line(self) -> None:
        assert derive_title("My Title\nBody content here.") == "My Title"

    def test__derive_title__skips_blank_lines(self) -> None:
        assert derive_title("\n   \n  Real Title  \nBody") == "Real Title"

    def test__derive_title__empty_text_is_untitled(self) -> None:
        assert derive_title("") == UNTITLED

    def test__derive_title__whitespace_only_is_untitled(self) -> None:
        assert derive_title("  \n\t\n ") == "Untitled"


class TestTruncateSummary:
    """Tests for truncate_summary."""

    def test__truncate_summary__1500_chars_keeps_first_1000(self) -> None:
        text = "a" * 700 + "b" * 800
        summary = truncate_summary(text)
        assert len(summary) == 1000
        assert summary == text[:1000]

    def test__truncate_summary__short_text_unchanged(self) -> None:
        text = "My Title\nBody content here."
        assert truncate_summary(text) == text

    def test__truncate_summary__custom_limit(self) -> None:
        assert truncate_summary("abcdef", limit=3) == "abc"


class TestFavicon:
    """Tests for hostname parsing and favicon derivation."""

    def test__favicon_url_for__lowercases_hostname(self) -> None:
        assert favicon_url_for("https://Example.com/Path") == (
            "https://www.google.com/s2/favicons?domain=example.com&sz=64"
        )

    def test__favicon_url_for__ignores_path_query_and_port(self) -> None:
        assert favicon_url_for("http://a.test:8080/x?y=1#z") == (
            "https://www.google.com/s2/favicons?domain=a.test&sz=64"
        )

    def test__favicon_url_for__custom_service(self) -> None:
        assert favicon_url_for("https://a.test", "https://icons.example/") == (
            "https://icons.example/?domain=a.test&sz=64"
        )

    @pytest.mark.parametrize(
        "url",
        ["not a url", "example.com/page", "ftp://example.com/file", "https://", "http://[::1"],
    )
    def test__parse_hostname__rejects_invalid(self, url: str) -> None:
        with pytest.raises(InvalidUrlError):
            parse_hostname(url)


class TestBuildReaderUrl:
    """Tests for build_reader_url."""

    def test__build_reader_url__encodes_whole_url(self) -> None:
        assert build_reader_url("https://a.test/x?y=1", JINA_READER_URL) == (
            "https://r.jina.ai/http://https%3A%2F%2Fa.test%2Fx%3Fy%3D1"
        )


class TestFetchExtractedText:
    """Tests for fetch_extracted_text."""

    async def test__fetch_extracted_text__success_sends_bearer_key(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        route = jina_mock.get(url__startswith=JINA_READER_URL).mock(
            return_value=httpx.Response(200, text="Title\nBody"),
        )

        text = await fetch_extracted_text("https://a.test", settings)

        assert text == "Title\nBody"
        request = route.calls.last.request
        assert request.headers["authorization"] == f"Bearer {TEST_JINA_KEY}"
        assert str(request.url).startswith("https://r.jina.ai/http://")

    async def test__fetch_extracted_text__missing_key(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        """No network call is attempted without an API key."""
        route = jina_mock.get(url__startswith=JINA_READER_URL)
        settings.jina_api_key = None

        with pytest.raises(MisconfigurationError) as exc_info:
            await fetch_extracted_text("https://a.test", settings)

        assert str(exc_info.value) == "Jina AI API key not configured"
        assert not route.called

    async def test__fetch_extracted_text__non_success_status_logged(
        self,
        settings: Settings,
        jina_mock: respx.MockRouter,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        route = jina_mock.get(url__startswith=JINA_READER_URL).mock(
            return_value=httpx.Response(503, text="upstream details"),
        )

        with caplog.at_level(logging.ERROR), pytest.raises(UpstreamFailureError) as exc_info:
            await fetch_extracted_text("https://a.test", settings)

        assert exc_info.value.status_code == 503
        assert exc_info.value.reason == "Service Unavailable"
        assert str(exc_info.value) == "Failed to process URL with Jina AI"
        assert "503" in caplog.text
        assert "Service Unavailable" in caplog.text
        # HTTP errors are not retried
        assert route.call_count == 1

    async def test__fetch_extracted_text__retries_transport_error_once(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        route = jina_mock.get(url__startswith=JINA_READER_URL).mock(
            side_effect=[
                httpx.ConnectError("Connection refused"),
                httpx.Response(200, text="Recovered"),
            ],
        )

        text = await fetch_extracted_text("https://a.test", settings)

        assert text == "Recovered"
        assert route.call_count == 2

    async def test__fetch_extracted_text__transport_error_after_retries(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        route = jina_mock.get(url__startswith=JINA_READER_URL).mock(
            side_effect=httpx.ReadTimeout("timed out"),
        )

        with pytest.raises(UpstreamFailureError) as exc_info:
            await fetch_extracted_text("https://a.test", settings)

        assert exc_info.value.status_code is None
        assert route.call_count == 2

    async def test__fetch_extracted_text__no_retries_configured(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        settings.jina_max_retries = 0
        route = jina_mock.get(url__startswith=JINA_READER_URL).mock(
            side_effect=httpx.ConnectError("Connection refused"),
        )

        with pytest.raises(UpstreamFailureError):
            await fetch_extracted_text("https://a.test", settings)

        assert route.call_count == 1


class TestProcessUrl:
    """Tests for process_url."""

    async def test__process_url__scenario(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        jina_mock.get(url__startswith=JINA_READER_URL).mock(
            return_value=httpx.Response(200, text="My Title\nBody content here."),
        )

        result = await process_url("https://a.test", settings)

        assert result.title == "My Title"
        assert result.summary == "My Title\nBody content here."
        assert result.favicon_url == "https://www.google.com/s2/favicons?domain=a.test&sz=64"
        assert result.processed_url == "https://a.test"

    async def test__process_url__truncates_long_text(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        text = "Heading\n" + "x" * 1492
        assert len(text) == 1500
        jina_mock.get(url__startswith=JINA_READER_URL).mock(
            return_value=httpx.Response(200, text=text),
        )

        result = await process_url("https://a.test", settings)

        assert result.summary == text[:1000]
        assert result.title == "Heading"

    async def test__process_url__caps_title_at_max_title_length(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        """A long first line still yields a title the store accepts."""
        jina_mock.get(url__startswith=JINA_READER_URL).mock(
            return_value=httpx.Response(200, text="A" * 600 + "\nbody"),
        )

        result = await process_url("https://a.test", settings)

        assert result.title == "A" * settings.max_title_length
        assert len(result.title) == 500

    async def test__process_url__echoes_url_unchanged(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        jina_mock.get(url__startswith=JINA_READER_URL).mock(
            return_value=httpx.Response(200, text="T"),
        )

        result = await process_url("https://Example.com/Path", settings)

        assert result.processed_url == "https://Example.com/Path"
        assert result.favicon_url.endswith("?domain=example.com&sz=64")

    @pytest.mark.parametrize("url", [None, "", "   ", 42, ["https://a.test"]])
    async def test__process_url__missing_input(self, settings: Settings, url: object) -> None:
        with pytest.raises(MissingInputError) as exc_info:
            await process_url(url, settings)
        assert str(exc_info.value) == "URL is required"

    async def test__process_url__invalid_url_checked_before_network(
        self, settings: Settings, jina_mock: respx.MockRouter,
    ) -> None:
        route = jina_mock.get(url__startswith=JINA_READER_URL)

        with pytest.raises(InvalidUrlError):
            await process_url("definitely not a url", settings)

        assert not route.called
