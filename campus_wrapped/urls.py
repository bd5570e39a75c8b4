"""Identifier extraction from visitor URLs and share links."""

import re
from urllib.parse import unquote, urlsplit

_IGNORED_SEGMENTS = {"index.html"}
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def _base_name(base_path: str) -> str:
    return base_path.strip("/")


def _last_segment(path: str, base_path: str = "/") -> str | None:
    base = _base_name(base_path)
    segments = [
        unquote(s) for s in path.split("/")
        if s and s != base and s not in _IGNORED_SEGMENTS
    ]
    return segments[-1] if segments else None


def _strip_base(path: str, base_path: str) -> str:
    base = _base_name(base_path)
    if not base:
        return path
    prefix = "/" + base
    if path == prefix or path.startswith(prefix + "/"):
        return path[len(prefix):] or "/"
    return path


def redirect_path(query: str) -> str | None:
    """Recover the original path from a static-host 404 redirect query.

    The 404 page rewrites ``/abc?x=1`` to ``/?/abc&x=1``; literal ``&`` in
    the original query are encoded as ``~and~``.
    """
    if not query.startswith("/"):
        return None
    return query.split("&", 1)[0].replace("~and~", "&")


def poi_id_from_url(url: str, base_path: str = "/") -> str | None:
    """Extract the raw POI identifier from a visitor URL.

    Takes the last non-empty path segment after removing base_path. When the
    path is empty, falls back to a ``?/<path>`` redirect query and then to a
    ``#/<path>`` fragment. The root URL yields None.
    """
    parts = urlsplit(url)
    path = _strip_base(parts.path or "/", base_path)

    segment = _last_segment(path, base_path)
    if segment is None:
        recovered = redirect_path(parts.query)
        if recovered:
            segment = _last_segment(_strip_base(recovered, base_path), base_path)
    if segment is None and parts.fragment.startswith("/"):
        segment = _last_segment(parts.fragment, base_path)
    return segment


def extract_short_code(text: str | None, base_path: str = "/") -> str | None:
    """Pull a short code out of a short URL, hash route or bare code.

    Handles ``https://is.gd/abc123``, ``/#/abc123`` and ``abc123``.
    """
    if not text:
        return None

    code = text.strip()
    if _SCHEME_RE.match(code):
        code = _SCHEME_RE.sub("", code, count=1)
        code = code.split("/", 1)[1] if "/" in code else ""

    code = code.lstrip("/")
    if code.startswith("#/"):
        code = code[2:]
    code = code.strip("/")

    base = _base_name(base_path)
    if base and (code == base or code.startswith(base + "/")):
        code = code[len(base):].strip("/")

    return code or None
