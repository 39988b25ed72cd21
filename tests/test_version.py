import pytest

from promcommon import version


@pytest.fixture
def build(monkeypatch):
    monkeypatch.setattr(version, "VERSION", "1.2.3")
    monkeypatch.setattr(version, "REVISION", "abc123")
    monkeypatch.setattr(version, "BRANCH", "main")
    monkeypatch.setattr(version, "BUILD_USER", "builder")
    monkeypatch.setattr(version, "BUILD_DATE", "20200101")
    monkeypatch.setattr(version, "PYTHON_VERSION", "3.12.1")


def test_info(build):
    assert version.info() == "(version=1.2.3, branch=main, revision=abc123)"


def test_build_context(build):
    assert version.build_context() == "(python=3.12.1, user=builder, date=20200101)"


def test_info_with_empty_build(monkeypatch):
    monkeypatch.setattr(version, "VERSION", "")
    monkeypatch.setattr(version, "REVISION", "")
    monkeypatch.setattr(version, "BRANCH", "")
    assert version.info() == "(version=, branch=, revision=)"