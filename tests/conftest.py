"""Pytest configuration and shared fixtures for ccmk tests."""

from __future__ import annotations

import logging
import os

import pytest


def pytest_configure(config):
    """Register project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("integration", "marks tests as integration tests"),
        ("core", "marks tests as core functionality tests"),
        ("piece", "marks tests as piece aggregation/hashing tests"),
        ("storage", "marks tests as byte source tests"),
        ("config", "marks tests as configuration tests"),
        ("cli", "marks tests as CLI tests"),
        ("property", "marks tests as property-based tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _isolate_ccmk_env(monkeypatch, tmp_path):
    """Keep user config files and CCMK_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("CCMK_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)

    from ccmk.config.config import reset_config

    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)


@pytest.fixture
def two_file_source():
    """The a.bin/b.bin pair whose first piece spans both files."""
    from ccmk.storage.byte_source import InMemoryByteSource

    return InMemoryByteSource(
        [
            (("root", "a.bin"), b"\x01\x02\x03"),
            (("root", "b.bin"), b"\x04\x05"),
        ]
    )


@pytest.fixture
def content_dir(tmp_path):
    """A directory tree with files of assorted sizes."""
    root = tmp_path / "content"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"a" * 10000)
    (root / "sub" / "b.txt").write_bytes(b"b" * 5000)
    (root / "empty.txt").write_bytes(b"")
    return root
