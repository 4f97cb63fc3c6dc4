"""Tests for content type resolution."""

from unittest.mock import MagicMock

from s3publish.transfer.content_type import (
    DEFAULT_CONTENT_TYPE,
    ContentTypeResolver,
    file_extension,
    resolve_content_type,
)


class TestOverrides:
    """The override table wins regardless of the sniffer."""

    def test_css_and_js_without_sniffer_answer(self):
        """Overrides apply even when the sniffer knows nothing."""
        resolver = ContentTypeResolver(sniffer=lambda path: None)

        assert resolver(".css") == "text/css"
        assert resolver(".js") == "text/javascript"

    def test_override_beats_sniffer(self):
        """Sniffer is never consulted for overridden extensions."""
        sniffer = MagicMock(return_value="application/x-javascript")
        resolver = ContentTypeResolver(sniffer=sniffer)

        assert resolver.resolve("dist/app.js") == "text/javascript"
        assert resolver.resolve("dist/theme.css") == "text/css"
        sniffer.assert_not_called()

    def test_override_is_case_insensitive(self):
        resolver = ContentTypeResolver(sniffer=lambda path: None)
        assert resolver.resolve("STYLE.CSS") == "text/css"


class TestSniffer:
    """Other extensions go to the sniffer."""

    def test_sniffer_result_used(self):
        sniffer = MagicMock(return_value="image/png")
        resolver = ContentTypeResolver(sniffer=sniffer)

        assert resolver.resolve("img/logo.png") == "image/png"
        sniffer.assert_called_once_with("img/logo.png")

    def test_fallback_when_sniffer_has_no_answer(self):
        resolver = ContentTypeResolver(sniffer=lambda path: None)
        assert resolver.resolve("blob.unknownext") == DEFAULT_CONTENT_TYPE

    def test_default_resolver_uses_mimetypes(self):
        assert resolve_content_type("index.html") == "text/html"
        assert resolve_content_type("notes.txt") == "text/plain"


class TestFileExtension:
    def test_regular_name(self):
        assert file_extension("a/b/c.tar.gz") == ".gz"

    def test_bare_extension(self):
        assert file_extension(".css") == ".css"

    def test_no_extension(self):
        assert file_extension("Makefile") == ""
