"""A WSGI router with path parameters, prefixed sub-routers and instrumentation."""

from __future__ import annotations

import posixpath
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from http import HTTPStatus
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlsplit

from promcommon.server import _serve

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]
Instrument = Callable[[str, WSGIApp], WSGIApp]
_Dispatch = Callable[[dict, Callable, dict], Iterable[bytes]]

_PARAMS_KEY = "promcommon.route.params"
_TEXT_PLAIN = "text/plain; charset=utf-8"
_HTML_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&#34;", "'": "&#39;"}
)


def param(environ: dict, name: str) -> str:
    """Return path parameter ``name`` of the request, or "" when absent."""
    return environ.get(_PARAMS_KEY, {}).get(name, "")


def with_param(environ: dict, name: str, value: str) -> dict:
    """Return a copy of ``environ`` with parameter ``name`` set to ``value``."""
    params = dict(environ.get(_PARAMS_KEY, {}))
    params[name] = value
    return {**environ, _PARAMS_KEY: params}


def _status(code: int) -> str:
    try:
        return f"{code} {HTTPStatus(code).phrase}"
    except ValueError:
        return str(code)


def _phrase(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


def _clean_path(path: str) -> str:
    """Canonical form of a URL path, keeping a trailing slash."""
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path
    cleaned = posixpath.normpath(re.sub(r"/+", "/", path))
    if path.endswith("/") and cleaned != "/":
        cleaned += "/"
    return cleaned


def _escape_non_ascii(text: str) -> str:
    return "".join(ch if ord(ch) < 0x80 else quote(ch, safe="") for ch in text)


def _send_redirect(environ, start_response, location: str, code: int):
    if not urlsplit(location).scheme:
        location, sep, query = location.partition("?")
        if not location.startswith("/"):
            old = environ.get("PATH_INFO") or "/"
            location = old[: old.rfind("/") + 1] + location
        location = _clean_path(location)
        if sep:
            location += "?" + query
    location = _escape_non_ascii(location)
    method = environ.get("REQUEST_METHOD", "GET")
    headers = [("Location", location)]
    body = b""
    if method in ("GET", "HEAD"):
        headers.append(("Content-Type", "text/html; charset=utf-8"))
    if method == "GET":
        text = f'<a href="{location.translate(_HTML_ESCAPES)}">{_phrase(code)}</a>.\n'
        body = text.encode("utf-8")
    start_response(_status(code), headers)
    return [body] if body else []


def _error(start_response, code: int, message: str, extra=()):
    body = (message + "\n").encode("utf-8")
    headers = [
        *extra,
        ("Content-Type", _TEXT_PLAIN),
        ("X-Content-Type-Options", "nosniff"),
        ("Content-Length", str(len(body))),
    ]
    start_response(_status(code), headers)
    return [body]


def _compile(pattern: str) -> tuple[re.Pattern, tuple[str, ...]]:
    if not pattern.startswith("/"):
        raise ValueError(f"path must begin with '/' in path {pattern!r}")
    parts: list[str] = []
    names: list[str] = []
    pos = 0
    for match in re.finditer(r"([:*])([^/]*)", pattern):
        kind, name = match.groups()
        if not name:
            raise ValueError(
                f"wildcards must be named with a non-empty name in path {pattern!r}"
            )
        if ":" in name or "*" in name:
            raise ValueError(f"only one wildcard per path segment is allowed in {pattern!r}")
        if kind == ":":
            parts.append(re.escape(pattern[pos : match.start()]))
            parts.append("([^/]+)")
        else:
            if match.end() != len(pattern):
                raise ValueError(
                    f"catch-all routes are only allowed at the end of the path in {pattern!r}"
                )
            if not pattern[: match.start()].endswith("/"):
                raise ValueError(f"no / before catch-all in path {pattern!r}")
            parts.append(re.escape(pattern[pos : match.start() - 1]))
            parts.append("(/.*)")
        names.append(name)
        pos = match.end()
    parts.append(re.escape(pattern[pos:]))
    return re.compile("".join(parts) + r"\Z", re.DOTALL), tuple(names)


@dataclass
class _Route:
    pattern: str
    dispatch: _Dispatch
    regex: re.Pattern = field(init=False)
    names: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        self.regex, self.names = _compile(self.pattern)

    def match(self, path: str) -> Optional[dict[str, str]]:
        found = self.regex.match(path)
        if found is None:
            return None
        return dict(zip(self.names, found.groups()))


class _RouteTable:
    """Routes per HTTP method, shared between a router and its derivatives."""

    def __init__(self) -> None:
        self._routes: dict[str, list[_Route]] = {}

    def add(self, method: str, pattern: str, dispatch: _Dispatch) -> None:
        routes = self._routes.setdefault(method, [])
        if any(route.pattern == pattern for route in routes):
            raise ValueError(f"a handle is already registered for {method} {pattern!r}")
        route = _Route(pattern, dispatch)
        # Static routes take precedence over routes with wildcards.
        if route.names:
            routes.append(route)
        else:
            routes.insert(0, route)

    def lookup(self, method: str, path: str) -> Optional[tuple[_Dispatch, dict]]:
        for route in self._routes.get(method, ()):
            params = route.match(path)
            if params is not None:
                return route.dispatch, params
        return None

    def allowed(self, path: str, method: str) -> list[str]:
        methods = sorted(
            m
            for m in self._routes
            if m != method and m != "OPTIONS" and self.lookup(m, path) is not None
        )
        if methods:
            methods.append("OPTIONS")
        return methods


class Router:
    """Routes WSGI requests to handlers by method and path.

    Paths may hold ``:name`` parameters matching one segment and a final
    ``*name`` catch-all; their values are read with ``param``.
    """

    def __init__(self) -> None:
        self._table = _RouteTable()
        self._prefix = ""
        self._instrument: Optional[Instrument] = None

    def _derive(self, prefix: str, instrument: Optional[Instrument]) -> "Router":
        router = Router()
        router._table = self._table
        router._prefix = prefix
        router._instrument = instrument
        return router

    def with_instrumentation(self, instrument: Instrument) -> "Router":
        """Return a router that wraps every registered handler with ``instrument``.

        Existing instrumentation is applied first, the new one around it.
        """
        previous = self._instrument
        if previous is not None:
            outer = instrument

            def instrument(name: str, handler: WSGIApp) -> WSGIApp:
                return outer(name, previous(name, handler))

        return self._derive(self._prefix, instrument)

    def with_prefix(self, prefix: str) -> "Router":
        """Return a router that prefixes all registered routes with ``prefix``."""
        return self._derive(self._prefix + prefix, self._instrument)

    def _handle(self, name: str, handler: WSGIApp) -> _Dispatch:
        if self._instrument is not None:
            handler = self._instrument(name, handler)

        def dispatch(environ, start_response, params):
            merged = dict(environ.get(_PARAMS_KEY, {}))
            merged.update(params)
            return handler({**environ, _PARAMS_KEY: merged}, start_response)

        return dispatch

    def _register(self, method: str, path: str, handler: WSGIApp) -> None:
        self._table.add(method, self._prefix + path, self._handle(path, handler))

    def get(self, path: str, handler: WSGIApp) -> None:
        """Register a GET route."""
        self._register("GET", path, handler)

    def options(self, path: str, handler: WSGIApp) -> None:
        """Register an OPTIONS route."""
        self._register("OPTIONS", path, handler)

    def delete(self, path: str, handler: WSGIApp) -> None:
        """Register a DELETE route."""
        self._register("DELETE", path, handler)

    def put(self, path: str, handler: WSGIApp) -> None:
        """Register a PUT route."""
        self._register("PUT", path, handler)

    def post(self, path: str, handler: WSGIApp) -> None:
        """Register a POST route."""
        self._register("POST", path, handler)

    def redirect(self, environ, start_response, path: str, code: int):
        """Answer with a redirect to absolute ``path`` under the router's prefix."""
        return _send_redirect(environ, start_response, self._prefix + path, code)

    def __call__(self, environ, start_response):
        method = environ.get("REQUEST_METHOD", "GET")
        path = environ.get("PATH_INFO") or "/"

        found = self._table.lookup(method, path)
        if found is not None:
            dispatch, params = found
            return dispatch(environ, start_response, params)

        if method != "CONNECT" and path != "/":
            code = 301 if method == "GET" else 308
            query = environ.get("QUERY_STRING", "")
            suffix = "?" + query if query else ""
            alternative = path[:-1] if path.endswith("/") else path + "/"
            if self._table.lookup(method, alternative) is not None:
                return _send_redirect(environ, start_response, alternative + suffix, code)
            cleaned = _clean_path(path)
            if cleaned != path and self._table.lookup(method, cleaned) is not None:
                return _send_redirect(environ, start_response, cleaned + suffix, code)

        allowed = self._table.allowed(path, method)
        if method == "OPTIONS" and allowed:
            start_response(_status(200), [("Allow", ", ".join(allowed))])
            return []
        if allowed:
            return _error(
                start_response, 405, "Method Not Allowed", [("Allow", ", ".join(allowed))]
            )
        return _error(start_response, 404, "404 page not found")


def file_serve(directory: str | Path) -> WSGIApp:
    """Return a handler serving files from ``directory``.

    The route it is registered on must provide a ``*filepath`` parameter.
    """
    root = Path(directory)

    def app(environ, start_response):
        env = {**environ, "PATH_INFO": param(environ, "filepath")}
        return _serve(root, env, start_response, {})

    return app