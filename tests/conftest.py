"""
Pytest configuration and shared fixtures for claude-setup tests.
"""

import hashlib
import logging
import tempfile
from datetime import date
from pathlib import Path
from typing import Generator

import pytest

from claude_setup.core.context import RunContext
from claude_setup.core.platform import Platform

BUCKET = "https://bucket.example.com/releases"
BINARY_CONTENT = b"#!/bin/sh\necho fake claude binary\n"
BINARY_SHA256 = hashlib.sha256(BINARY_CONTENT).hexdigest()


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = temp_dir / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    monkeypatch.delenv("GITHUB_PATH", raising=False)

    return fake_home


@pytest.fixture
def linux_x64() -> Platform:
    """Linux x64 (glibc) platform."""
    return Platform(os="linux", arch="x64", platform_id="linux-x64")


@pytest.fixture
def context(linux_x64) -> RunContext:
    """Run context for linux-x64 against the test bucket on a fixed day."""
    return RunContext(
        bucket_url=BUCKET, platform=linux_x64, clock=lambda: date(2025, 3, 14)
    )


@pytest.fixture
def bucket_url() -> str:
    """Base URL of the fake release bucket."""
    return BUCKET


@pytest.fixture
def binary_payload():
    """Fake binary bytes and their SHA-256 digest."""
    return BINARY_CONTENT, BINARY_SHA256


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset module-level caches between tests."""
    from claude_setup.core.platform import clear_platform_cache

    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo root logger changes made by CLI runs (basicConfig with force)."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
