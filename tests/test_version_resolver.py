#!/usr/bin/env python3
"""Tests for --version resolution."""

from importlib.metadata import PackageNotFoundError

from vivadofpgatool.__version__ import __version__
from vivadofpgatool.utils import version_resolver
from vivadofpgatool.utils.version_resolver import DISTRIBUTION_NAME, get_package_version


def test_installed_distribution_version_wins(monkeypatch):
    seen = []

    def fake_version(name):
        seen.append(name)
        return "9.9.9"

    monkeypatch.setattr(version_resolver, "version", fake_version)
    assert get_package_version() == "9.9.9"
    assert seen == [DISTRIBUTION_NAME]


def test_falls_back_to_version_module(monkeypatch):
    def not_installed(name):
        raise PackageNotFoundError(name)

    monkeypatch.setattr(version_resolver, "version", not_installed)
    assert get_package_version() == __version__
