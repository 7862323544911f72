"""Tests for the package version metadata."""

import importlib

import pytest
from packaging.version import Version

import ziwei_kline
from ziwei_kline import _version as version_module


def test_version_is_semver_patch():
    version = Version(ziwei_kline.__version__)

    assert len(version.release) == 3, (
        "ziwei_kline.__version__ must contain exactly three release components"
    )


def test_version_override_from_semantic_release(monkeypatch):
    monkeypatch.setenv("PYTHON_SEMANTIC_RELEASE_VERSION", "9.8.7")
    importlib.reload(version_module)
    reloaded = importlib.reload(ziwei_kline)

    assert reloaded.__version__ == "9.8.7"

    monkeypatch.setenv("PYTHON_SEMANTIC_RELEASE_VERSION", "invalid-version")
    with pytest.raises(RuntimeError):
        importlib.reload(version_module)

    monkeypatch.setenv("PYTHON_SEMANTIC_RELEASE_VERSION", "1.2")
    with pytest.raises(RuntimeError):
        importlib.reload(version_module)

    monkeypatch.delenv("PYTHON_SEMANTIC_RELEASE_VERSION", raising=False)
    importlib.reload(version_module)
    importlib.reload(ziwei_kline)
