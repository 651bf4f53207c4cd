"""
Tests for the version module of the txsubmit SDK.
"""
import re
from importlib import metadata as importlib_metadata

import pytest

from txsubmit_sdk import __version__
from txsubmit_sdk.version import FALLBACK_VERSION, get_version, pyproject_version


@pytest.fixture
def not_installed(monkeypatch):
    def _missing(name):
        raise importlib_metadata.PackageNotFoundError(name)

    monkeypatch.setattr(importlib_metadata, "version", _missing)


def test_version_format():
    """Test that the version string follows semantic versioning"""
    assert re.match(r'^\d+\.\d+\.\d+$', __version__), "Version should follow semantic versioning"


def test_version_from_metadata(monkeypatch, tmp_path):
    calls = []

    def _installed(name):
        calls.append(name)
        return "2.3.4"

    monkeypatch.setattr(importlib_metadata, "version", _installed)
    assert get_version(tmp_path / "pyproject.toml") == "2.3.4"
    assert calls == ["txsubmit-sdk"]


def test_version_from_pyproject(not_installed, tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text('[project]\nname = "txsubmit-sdk"\nversion = "1.2.3"\n')

    assert pyproject_version(path) == "1.2.3"
    assert get_version(path) == "1.2.3"


@pytest.mark.parametrize("content", [
    None,
    '[project]\nname = "txsubmit-sdk"\n',
    'version = = broken',
])
def test_version_falls_back(not_installed, tmp_path, content):
    """Missing file, missing key and invalid TOML all give the fallback version"""
    path = tmp_path / "pyproject.toml"
    if content is not None:
        path.write_text(content)

    assert get_version(path) == FALLBACK_VERSION
