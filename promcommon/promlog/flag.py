"""Command-line flags that configure the allowed log level and format."""

from __future__ import annotations

import argparse

from promcommon.promlog.log import AllowedFormat, AllowedLevel, Config

LEVEL_FLAG_NAME = "log.level"
LEVEL_FLAG_HELP = (
    "Only log messages with the given severity or above. "
    "One of: [debug, info, warn, error]"
)
LEVEL_FLAG_DEST = "log_level"
LEVEL_FLAG_DEFAULT = "info"

FORMAT_FLAG_NAME = "log.format"
FORMAT_FLAG_HELP = "Output format of log messages. One of: [logfmt, json]"
FORMAT_FLAG_DEST = "log_format"
FORMAT_FLAG_DEFAULT = "logfmt"


def _level(text: str) -> str:
    try:
        AllowedLevel().set(text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from None
    return text


def _format(text: str) -> str:
    try:
        AllowedFormat().set(text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from None
    return text


def add_flags(parser: argparse.ArgumentParser, config: Config) -> None:
    """Add the log level and log format flags to ``parser``.

    The config receives fresh level and format values set to the defaults;
    call apply_flags with the parsed namespace to take the given values over.
    """
    config.level = AllowedLevel()
    config.level.set(LEVEL_FLAG_DEFAULT)
    parser.add_argument(
        "--" + LEVEL_FLAG_NAME,
        dest=LEVEL_FLAG_DEST,
        default=LEVEL_FLAG_DEFAULT,
        type=_level,
        metavar="LEVEL",
        help=LEVEL_FLAG_HELP,
    )

    config.format = AllowedFormat()
    config.format.set(FORMAT_FLAG_DEFAULT)
    parser.add_argument(
        "--" + FORMAT_FLAG_NAME,
        dest=FORMAT_FLAG_DEST,
        default=FORMAT_FLAG_DEFAULT,
        type=_format,
        metavar="FORMAT",
        help=FORMAT_FLAG_HELP,
    )


def apply_flags(namespace: argparse.Namespace, config: Config) -> Config:
    """Set the config's level and format from a parsed namespace.

    Raises ValueError if a value is not recognised.
    """
    level = getattr(namespace, LEVEL_FLAG_DEST, LEVEL_FLAG_DEFAULT)
    fmt = getattr(namespace, FORMAT_FLAG_DEST, FORMAT_FLAG_DEFAULT)
    if config.level is None:
        config.level = AllowedLevel()
    config.level.set(level)
    if config.format is None:
        config.format = AllowedFormat()
    config.format.set(fmt)
    return config