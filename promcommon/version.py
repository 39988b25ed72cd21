"""Build information for the running program."""

from __future__ import annotations

import platform
import sys

# Populated at build time.
VERSION = ""
REVISION = ""
BRANCH = ""
BUILD_USER = ""
BUILD_DATE = ""
PYTHON_VERSION = platform.python_version()


def _platform() -> str:
    return f"{sys.platform}/{platform.machine().lower()}"


def print_version(program: str) -> str:
    """Return a multi-line description of the build."""
    text = f"""
{program}, version {VERSION} (branch: {BRANCH}, revision: {REVISION})
  build user:       {BUILD_USER}
  build date:       {BUILD_DATE}
  python version:   {PYTHON_VERSION}
  platform:         {_platform()}
"""
    return text.strip()


def info() -> str:
    """Return version, branch and revision information."""
    return f"(version={VERSION}, branch={BRANCH}, revision={REVISION})"


def build_context() -> str:
    """Return interpreter version, build user and build date information."""
    return f"(python={PYTHON_VERSION}, user={BUILD_USER}, date={BUILD_DATE})"