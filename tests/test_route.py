import pytest

from promcommon.route import Router, file_serve, param, with_param


def _environ(method, path, query=""):
    return {"REQUEST_METHOD": method, "PATH_INFO": path, "QUERY_STRING": query}


def _call(app, environ):
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body


def _ok(environ, start_response):
    start_response("200 OK", [])
    return [b"ok"]


def _echo(*names):
    def handler(environ, start_response):
        start_response("200 OK", [])
        return [",".join(param(environ, name) for name in names).encode()]

    return handler


def test_redirect():
    router = Router().with_prefix("/test/prefix")
    status, headers, _ = _call(
        lambda env, sr: router.redirect(env, sr, "/some/endpoint", 302),
        _environ("GET", "/foo"),
    )
    assert status == "302 Found"
    assert headers["Location"] == "/test/prefix/some/endpoint"


def test_context():
    router = Router()
    router.get("/test/:foo/", _echo("foo"))
    status, _, body = _call(router, _environ("GET", "/test/bar/"))
    assert status == "200 OK"
    assert body == b"bar"


def test_context_with_value():
    router = Router()
    router.get("/test/:foo/", _echo("foo", "lorem", "dolor"))
    environ = _environ("GET", "/test/bar/")
    for name, value in {"lorem": "ipsum", "dolor": "sit"}.items():
        environ = with_param(environ, name, value)
    status, _, body = _call(router, environ)
    assert status == "200 OK"
    assert body == b"bar,ipsum,sit"


def test_context_without_value():
    router = Router()
    router.get("/test", _echo("foo"))
    status, _, body = _call(router, _environ("GET", "/test"))
    assert status == "200 OK"
    assert body == b""


def test_with_param_does_not_change_original():
    environ = _environ("GET", "/")
    updated = with_param(environ, "a", "b")
    assert param(updated, "a") == "b"
    assert param(environ, "a") == ""


def test_instrumentation():
    got = []

    def instrument(name, handler):
        got.append(name)
        return handler

    plain = Router()
    plain.get("/foo", _ok)
    status, _, body = _call(plain, _environ("GET", "/foo"))
    assert (status, body) == ("200 OK", b"ok")
    assert got == []

    router = Router().with_instrumentation(instrument)
    router.get("/foo", _ok)
    status, _, body = _call(router, _environ("GET", "/foo"))
    assert (status, body) == ("200 OK", b"ok")
    assert got == ["/foo"]


def test_instrumentations():
    got = []

    def make(tag):
        def instrument(name, handler):
            got.append(tag + name)
            return handler

        return instrument

    router = (
        Router()
        .with_instrumentation(make("1"))
        .with_instrumentation(make("2"))
        .with_instrumentation(make("3"))
    )
    router.get("/foo", _ok)
    status, _, body = _call(router, _environ("GET", "/foo"))
    assert (status, body) == ("200 OK", b"ok")
    assert got == ["1/foo", "2/foo", "3/foo"]


def test_handler_name_excludes_prefix():
    got = []

    def instrument(name, handler):
        got.append(name)
        return handler

    router = Router().with_prefix("/api").with_instrumentation(instrument)
    router.get("/foo", _ok)
    status, _, body = _call(router, _environ("GET", "/api/foo"))
    assert got == ["/foo"]
    assert (status, body) == ("200 OK", b"ok")


def test_not_found():
    router = Router()
    router.get("/foo", _ok)
    status, _, body = _call(router, _environ("GET", "/bar"))
    assert status == "404 Not Found"
    assert body == b"404 page not found\n"


def test_method_not_allowed():
    router = Router()
    router.get("/foo", _ok)
    status, headers, _ = _call(router, _environ("POST", "/foo"))
    assert status == "405 Method Not Allowed"
    assert headers["Allow"] == "GET, OPTIONS"


def test_trailing_slash_redirect():
    router = Router()
    router.get("/foo/", _ok)
    status, headers, _ = _call(router, _environ("GET", "/foo", "a=1"))
    assert status == "301 Moved Permanently"
    assert headers["Location"] == "/foo/?a=1"


def test_clean_path_redirect():
    router = Router()
    router.post("/foo/bar", _ok)
    status, headers, _ = _call(router, _environ("POST", "/foo//x/../bar"))
    assert status == "308 Permanent Redirect"
    assert headers["Location"] == "/foo/bar"


def test_catch_all_parameter():
    router = Router()
    router.get("/static/*filepath", _echo("filepath"))
    status, _, body = _call(router, _environ("GET", "/static/css/site.css"))
    assert status == "200 OK"
    assert body == b"/css/site.css"


def test_duplicate_route_raises():
    router = Router()
    router.get("/foo", _ok)
    with pytest.raises(ValueError):
        router.with_prefix("").get("/foo", _ok)


def test_invalid_patterns_raise():
    router = Router()
    with pytest.raises(ValueError):
        router.get("foo", _ok)
    with pytest.raises(ValueError):
        router.get("/a/*rest/more", _ok)
    with pytest.raises(ValueError):
        router.get("/a/:", _ok)


def test_file_serve(tmp_path):
    (tmp_path / "hello.txt").write_bytes(b"hi there")
    router = Router()
    router.get("/static/*filepath", file_serve(tmp_path))
    status, _, body = _call(router, _environ("GET", "/static/hello.txt"))
    assert status == "200 OK"
    assert body == b"hi there"
    status, _, _ = _call(router, _environ("GET", "/static/missing.txt"))
    assert status == "404 Not Found"