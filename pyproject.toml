[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "promcommon"
version = "0.1.0"
description = "Shared monitoring data model (labels, metrics, samples, alerts, silences, durations) with leveled logging setup, a WSGI router and a static file server."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "monitoring",
    "metrics",
    "labels",
    "fingerprint",
    "alerts",
    "silences",
    "duration",
    "logfmt",
    "wsgi",
    "router",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Monitoring",
    "Topic :: Internet :: WWW/HTTP :: WSGI",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["promcommon"]

[tool.pytest.ini_options]
addopts = "-ra"
