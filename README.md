# promcommon

`promcommon` gathers the data structures and small helpers that monitoring
components share: labels and metrics with stable fingerprints, alerts and
silences, millisecond timestamps and durations, query result values with their
JSON form, a leveled logger, a WSGI router and a static file server. It needs
nothing beyond the standard library.

## What is inside

### `promcommon.model`

- `labels`: `LabelName` (with `is_valid()` and `from_json()`), `LabelValue`
  (with `is_valid()`), the ordered `LabelPair` dataclass, `format_label_names()`
  and constants such as `METRIC_NAME_LABEL` (`"__name__"`) and `LABEL_NAME_RE`.
- `labelset`: `LabelSet`, a `dict` of label names to values, with `validate()`,
  `equal()`, `before()`, `clone()`, `merge()`, `fingerprint()`,
  `fast_fingerprint()` and `from_json()`. `str()` gives `{a="b", c="d"}` with
  the pairs sorted.
- `metric`: `Metric`, a `LabelSet` whose `str()` puts the `__name__` value in
  front, and `is_valid_metric_name()`.
- `fnv`, `fingerprinting` and `signature`: FNV-1a 64-bit hashing,
  `Fingerprint` (printed as 16 hexadecimal digits), `parse_fingerprint()`,
  `fingerprint_from_string()`, `FingerprintSet`, and the signature functions
  `labels_to_signature()`, `label_set_to_fingerprint()`,
  `label_set_to_fast_fingerprint()`, `signature_for_labels()` and
  `signature_without_labels()`.
- `alert`: `AlertStatus`, `Alert` (with `name()`, `fingerprint()`,
  `resolved()`, `resolved_at()`, `status()` and `validate()`) and `Alerts`
  (with `sort_chronologically()`, `has_firing()` and `status()`).
- `silence`: `Matcher` (with `validate()` and `from_json()`) and `Silence`
  (with `validate()`).
- `timestamps`: `Time`, milliseconds since the epoch, with conversions to and
  from Unix seconds, nanoseconds and `datetime`, and JSON encoding as seconds;
  `EARLIEST`, `LATEST`, `Interval`; `Duration` and `parse_duration()`, which
  read and write the compact form `1y`, `2w`, `3d`, `4h`, `5m`, `6s`, `7ms`
  (a year is 365 days, a week 7 days).
- `value`: `SampleValue`, `SamplePair`, `Sample`, `Samples`, `SampleStream`,
  `ValueType`, `Scalar`, `String`, `Vector` and `Matrix`, with `to_json()` and
  `from_json()` where the JSON form is defined.

Validation methods raise `ValueError` with a message describing the problem.

### `promcommon.promlog`

- `log`: `AllowedLevel` (`debug`, `info`, `warn`, `error`), `AllowedFormat`
  (`logfmt`, `json`), `Config`, `Logger` and `new()`. Every line carries a
  UTC `ts` with millisecond precision and the `caller` file and line. When a
  level is configured, entries with a `level` key below it are dropped.
- `flag`: `add_flags()` adds `--log.level` (default `info`) and `--log.format`
  (default `logfmt`) to an `argparse` parser; `apply_flags()` copies the parsed
  values into a `Config`.

### `promcommon.route`

`Router` is a WSGI application. Paths may hold `:name` parameters matching one
segment and a final `*name` catch-all; handlers read them with `param()`, and
`with_param()` returns an environ with a parameter added. `with_prefix()` and
`with_instrumentation()` return routers sharing the same routes. Unmatched
requests get a redirect to the path with or without a trailing slash or to the
cleaned path when that matches, `405 Method Not Allowed` with an `Allow` header,
an `Allow` answer to `OPTIONS`, or `404`. `Router.redirect()` answers with a
redirect under the router's prefix. `file_serve()` returns a handler serving
files from a directory under a `*filepath` route.

### `promcommon.server`

`static_file_server(root)` returns a WSGI application serving files under
`root`, with a fixed `Content-Type` for `.js`, `.css`, `.png`, `.jpg` and
`.gif`, directory listings, redirects for `index.html` and trailing slashes, and
`If-Modified-Since` handling.

### `promcommon.version`

`print_version()`, `info()` and `build_context()` format the build information
held in `VERSION`, `REVISION`, `BRANCH`, `BUILD_USER`, `BUILD_DATE` and
`PYTHON_VERSION`. The build fields are empty strings unless set.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Fingerprint a label set:

```python
from promcommon.model.labelset import LabelSet

labels = LabelSet({"job": "api", "instance": "host:9090"})
print(labels)                # {instance="host:9090", job="api"}
print(labels.fingerprint())  # 16-digit hexadecimal fingerprint
```

Parse a duration:

```python
from promcommon.model.timestamps import parse_duration

d = parse_duration("3w2d1h")
print(d)  # 23d1h
```

Turn a metric into a string:

```python
from promcommon.model.metric import Metric

m = Metric({"__name__": "http_requests_total", "code": "200"})
print(m)  # http_requests_total{code="200"}
```

Encode a sample as JSON:

```python
from promcommon.model.metric import Metric
from promcommon.model.value import Sample

s = Sample(metric=Metric({"__name__": "up"}), value=1, timestamp=1234567)
print(s.to_json())  # {"metric":{"__name__":"up"},"value":[1234.567,"1"]}
```

Route WSGI requests:

```python
from promcommon.route import Router, param

router = Router().with_prefix("/api")

def hello(environ, start_response):
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [f"hello {param(environ, 'name')}".encode()]

router.get("/hello/:name", hello)
```

Set up logging from command-line options:

```python
import argparse
import sys

from promcommon.promlog.flag import add_flags, apply_flags
from promcommon.promlog.log import Config, new

parser = argparse.ArgumentParser()
config = Config()
add_flags(parser, config)
apply_flags(parser.parse_args(), config)
logger = new(config, sys.stderr)
logger.log("level", "info", "msg", "started")
```

## What it does not do

- It has no command of its own; it is a library to import.
- The router and the file server are WSGI applications only. They do not
  listen on a socket; run them under any WSGI server.
- It does not export build information as a metric; `promcommon.version`
  only formats it as text.