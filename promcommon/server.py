"""A WSGI static file server that pins content types for common web assets."""

from __future__ import annotations

import mimetypes
import os
import posixpath
import re
import stat
from collections.abc import Callable, Iterable
from datetime import timezone
from email.utils import formatdate, parsedate_to_datetime
from http import HTTPStatus
from pathlib import Path
from urllib.parse import quote

MIME_TYPES = {
    ".js": "application/javascript",
    ".css": "text/css",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".gif": "image/gif",
}

_INDEX_PAGE = "/index.html"
_TEXT_PLAIN = "text/plain; charset=utf-8"
_HTML = "text/html; charset=utf-8"
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)
_HTML_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&#34;", "'": "&#39;"}
)

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]


def _ext(path: str) -> str:
    """Extension of the last path element, including the dot."""
    dot = path.rfind(".")
    return path[dot:] if dot > path.rfind("/") else ""


def _base(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _clean(path: str) -> str:
    return posixpath.normpath(re.sub(r"/+", "/", path))


def _status(code: int) -> str:
    return f"{code} {HTTPStatus(code).phrase}"


def _respond(environ, start_response, code, headers, body=b""):
    start_response(_status(code), list(headers.items()))
    if environ.get("REQUEST_METHOD", "GET") == "HEAD":
        return []
    return [body]


def _error(environ, start_response, headers, code):
    headers["Content-Type"] = _TEXT_PLAIN
    headers["X-Content-Type-Options"] = "nosniff"
    message = "404 page not found" if code == 404 else _status(code)
    body = (message + "\n").encode("utf-8")
    headers["Content-Length"] = str(len(body))
    return _respond(environ, start_response, code, headers, body)


def _redirect(environ, start_response, headers, location):
    query = environ.get("QUERY_STRING", "")
    if query:
        location += "?" + query
    headers["Location"] = location
    return _respond(environ, start_response, 301, headers)


def _not_modified(environ, mtime: float) -> bool:
    if environ.get("REQUEST_METHOD", "GET") not in ("GET", "HEAD"):
        return False
    if environ.get("HTTP_IF_NONE_MATCH"):
        return False
    raw = environ.get("HTTP_IF_MODIFIED_SINCE")
    if not raw or mtime <= 0:
        return False
    try:
        since = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return False
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return int(mtime) <= since.timestamp()


def _sniff(data: bytes) -> str:
    if any(b in _BINARY_BYTES for b in data[:512]):
        return "application/octet-stream"
    return _TEXT_PLAIN


def _guess_type(name: str, data: bytes) -> str:
    guessed, _ = mimetypes.guess_type(name)
    if guessed is None:
        return _sniff(data)
    if guessed.startswith("text/"):
        return guessed + "; charset=utf-8"
    return guessed


def _listing(directory: Path) -> bytes:
    names = sorted(
        entry.name + "/" if entry.is_dir() else entry.name
        for entry in os.scandir(directory)
    )
    lines = ["<pre>\n"]
    for name in names:
        href = quote(name, safe="/:@!$&'()*+,;=-._~")
        lines.append(f'<a href="{href}">{name.translate(_HTML_ESCAPES)}</a>\n')
    lines.append("</pre>\n")
    return "".join(lines).encode("utf-8")


def _serve(root: Path, environ, start_response, headers: dict[str, str]):
    url = environ.get("PATH_INFO") or ""
    if not url.startswith("/"):
        url = "/" + url
    if url.endswith(_INDEX_PAGE):
        return _redirect(environ, start_response, headers, "./")

    name = _clean(url)
    target = root.joinpath(*(part for part in name.split("/") if part))
    try:
        info = target.stat()
    except (FileNotFoundError, NotADirectoryError):
        return _error(environ, start_response, headers, 404)
    except PermissionError:
        return _error(environ, start_response, headers, 403)
    except OSError:
        return _error(environ, start_response, headers, 500)

    if stat.S_ISDIR(info.st_mode):
        if not url.endswith("/"):
            return _redirect(environ, start_response, headers, _base(url) + "/")
        index = target / "index.html"
        try:
            index_info = index.stat()
        except OSError:
            index_info = None
        if index_info is not None and stat.S_ISREG(index_info.st_mode):
            target, info, name = index, index_info, name.rstrip("/") + _INDEX_PAGE
        else:
            if _not_modified(environ, info.st_mtime):
                return _write_not_modified(environ, start_response, headers)
            try:
                body = _listing(target)
            except OSError:
                return _error(environ, start_response, headers, 500)
            headers.setdefault("Content-Type", _HTML)
            headers["Last-Modified"] = formatdate(info.st_mtime, usegmt=True)
            headers["Content-Length"] = str(len(body))
            return _respond(environ, start_response, 200, headers, body)
    elif url.endswith("/"):
        return _redirect(environ, start_response, headers, "../" + _base(url))

    if _not_modified(environ, info.st_mtime):
        return _write_not_modified(environ, start_response, headers)
    try:
        body = target.read_bytes()
    except PermissionError:
        return _error(environ, start_response, headers, 403)
    except OSError:
        return _error(environ, start_response, headers, 500)
    if "Content-Type" not in headers:
        headers["Content-Type"] = _guess_type(name, body)
    headers["Last-Modified"] = formatdate(info.st_mtime, usegmt=True)
    headers["Content-Length"] = str(len(body))
    return _respond(environ, start_response, 200, headers, body)


def _write_not_modified(environ, start_response, headers):
    for key in ("Content-Type", "Content-Length", "Last-Modified"):
        headers.pop(key, None)
    return _respond(environ, start_response, 304, headers)


def static_file_server(root: str | os.PathLike) -> WSGIApp:
    """Return a WSGI app serving files under ``root``.

    Requests for .js, .css, .png, .jpg and .gif files get a fixed Content-Type.
    """
    root_path = Path(root)

    def app(environ, start_response):
        headers: dict[str, str] = {}
        content_type = MIME_TYPES.get(_ext(environ.get("PATH_INFO") or ""))
        if content_type:
            headers["Content-Type"] = content_type
        return _serve(root_path, environ, start_response, headers)

    return app