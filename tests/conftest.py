"""Shared fixtures for the collector tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import structlog

from changelog_collector.config import CollectorConfig


@pytest.fixture(autouse=True)
def log_events() -> list[dict]:
    """Capture structlog events instead of printing them."""
    with structlog.testing.capture_logs() as events:
        yield events


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """A repository checkout with an empty fragment directory."""
    (tmp_path / "changelog" / "unreleased").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def fragment_dir(repo_dir: Path) -> Path:
    return repo_dir / "changelog" / "unreleased"


@pytest.fixture
def config(repo_dir: Path) -> CollectorConfig:
    return CollectorConfig(
        repo_path=repo_dir,
        changelog_path="changelog/unreleased",
        system="Kong",
        repo="Kong/kong",
    )
