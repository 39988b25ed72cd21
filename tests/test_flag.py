import argparse
import io
import json

import pytest

from promcommon.promlog.flag import (
    FORMAT_FLAG_DEST,
    LEVEL_FLAG_DEST,
    add_flags,
    apply_flags,
)
from promcommon.promlog.log import Config, new


def _setup():
    parser = argparse.ArgumentParser(prog="prog")
    config = Config()
    add_flags(parser, config)
    return parser, config


def test_defaults_are_set_on_add():
    _, config = _setup()
    assert str(config.level) == "info"
    assert str(config.format) == "logfmt"


def test_defaults_after_parsing_nothing():
    parser, config = _setup()
    ns = parser.parse_args([])
    apply_flags(ns, config)
    assert str(config.level) == "info"
    assert str(config.format) == "logfmt"


def test_given_values_are_applied():
    parser, config = _setup()
    ns = parser.parse_args(["--log.level", "debug", "--log.format", "json"])
    result = apply_flags(ns, config)
    assert result is config
    assert str(config.level) == "debug"
    assert str(config.format) == "json"


@pytest.mark.parametrize(
    "argv",
    [["--log.level", "verbose"], ["--log.format", "xml"]],
)
def test_unrecognised_values_are_rejected_by_parser(argv, capsys):
    parser, _ = _setup()
    with pytest.raises(SystemExit):
        parser.parse_args(argv)
    assert "unrecognized log" in capsys.readouterr().err


def test_apply_rejects_bad_level():
    _, config = _setup()
    ns = argparse.Namespace(**{LEVEL_FLAG_DEST: "bogus", FORMAT_FLAG_DEST: "logfmt"})
    with pytest.raises(ValueError, match="unrecognized log level"):
        apply_flags(ns, config)


def test_apply_rejects_bad_format():
    _, config = _setup()
    ns = argparse.Namespace(**{LEVEL_FLAG_DEST: "info", FORMAT_FLAG_DEST: "yaml"})
    with pytest.raises(ValueError, match="unrecognized log format"):
        apply_flags(ns, config)


def test_apply_fills_empty_config():
    config = Config()
    ns = argparse.Namespace(**{LEVEL_FLAG_DEST: "warn", FORMAT_FLAG_DEST: "json"})
    apply_flags(ns, config)
    assert str(config.level) == "warn"
    assert str(config.format) == "json"


def test_help_mentions_flags():
    parser, _ = _setup()
    text = parser.format_help()
    assert "--log.level" in text
    assert "--log.format" in text


def test_configured_logger_uses_json_format():
    parser, config = _setup()
    apply_flags(parser.parse_args(["--log.format", "json"]), config)
    stream = io.StringIO()
    new(config, stream).log("hello", "world")
    record = json.loads(stream.getvalue())
    assert record["hello"] == "world"