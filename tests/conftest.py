"""Shared pytest fixtures."""

import logging
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(autouse=True)
def reset_logging() -> Generator:
    """Point stdlib logging back at stderr after each test.

    CLI tests configure logging against CliRunner's temporary streams,
    which are closed once the invocation returns.
    """
    yield
    logging.basicConfig(
        format="%(message)s", stream=sys.stderr, level=logging.INFO, force=True
    )


@pytest.fixture
def default_config_path() -> Path:
    """Path to the shipped example config."""
    return REPO_ROOT / "config" / "default.yaml"


@pytest.fixture
def labels() -> dict[str, bool]:
    """A small label set for evaluation tests."""
    return {"admin": True, "staff": True, "team lead": True}


@pytest.fixture
def policy_config_path(tmp_path: Path) -> Path:
    """
    Temporary YAML config with a few named policies.

    Returns the path to the written file.
    """
    path = tmp_path / "authz.yaml"
    path.write_text(
        """
logging:
  level: WARNING
labels:
  strict: true
policies:
  admin_only: "admin"
  reviewer: 'staff & (reviewer | "team lead")'
  release: "(admin | release-manager) & ci:green"
"""
    )
    return path
