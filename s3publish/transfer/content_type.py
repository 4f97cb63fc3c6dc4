"""
Content type resolution for uploaded files.

A small override table keyed by extension always wins; any other file is
handed to a sniffer (``mimetypes`` by default) and falls back to
``application/octet-stream`` when the sniffer has no answer.
"""

import mimetypes
from pathlib import PurePath
from typing import Callable, Dict, Optional, Union

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Extensions whose type must not depend on the host's mime database
CONTENT_TYPE_OVERRIDES: Dict[str, str] = {
    ".css": "text/css",
    ".js": "text/javascript",
}

PathLike = Union[str, PurePath]
Sniffer = Callable[[PathLike], Optional[str]]


def sniff_content_type(path: PathLike) -> Optional[str]:
    """Guess a content type from the file name using the mimetypes database."""
    content_type, _encoding = mimetypes.guess_type(str(path), strict=False)
    return content_type


def file_extension(path: PathLike) -> str:
    """
    Lower-cased extension of ``path``, including the dot.

    A bare dotted name such as ``".css"`` is treated as the extension itself.
    """
    name = PurePath(path).name
    suffix = PurePath(name).suffix
    if not suffix and name.startswith(".") and name.count(".") == 1:
        suffix = name
    return suffix.lower()


class ContentTypeResolver:
    """
    Maps a file path to the Content-Type sent with its upload.

    Example:
        >>> resolver = ContentTypeResolver()
        >>> resolver.resolve("site/app.js")
        'text/javascript'
        >>> resolver.resolve("site/logo.png")
        'image/png'
    """

    def __init__(
        self,
        sniffer: Optional[Sniffer] = None,
        overrides: Optional[Dict[str, str]] = None,
    ) -> None:
        self._sniffer = sniffer or sniff_content_type
        self._overrides = dict(CONTENT_TYPE_OVERRIDES if overrides is None else overrides)

    def resolve(self, path: PathLike) -> str:
        override = self._overrides.get(file_extension(path))
        if override:
            return override
        return self._sniffer(path) or DEFAULT_CONTENT_TYPE

    __call__ = resolve


_default_resolver = ContentTypeResolver()


def resolve_content_type(path: PathLike) -> str:
    """Resolve ``path`` with the default resolver."""
    return _default_resolver.resolve(path)
