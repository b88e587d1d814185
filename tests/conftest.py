"""Shared pytest fixtures for the enforcer tests."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
PKG_DIR = ROOT / "enforcer"
if str(PKG_DIR) not in sys.path:
    sys.path.insert(0, str(PKG_DIR))

from duo_core.commands import CommandChannel  # noqa: E402
from duo_core.state import StatusStore  # noqa: E402


@pytest.fixture
def store():
    return StatusStore()


@pytest.fixture
def channel():
    return CommandChannel()


@pytest.fixture
def done_file(tmp_path):
    return tmp_path / "cache" / "duo-done"
