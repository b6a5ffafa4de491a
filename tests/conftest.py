"""Shared test fixtures."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from parrot.config import AppConfig, EditorConfig, LoggingConfig, ShellConfig, StorageConfig
from parrot.storage.store import SnapshotStore


@pytest.fixture
def app_config(tmp_path):
    """Create a test configuration."""
    return AppConfig(
        storage=StorageConfig(path=str(tmp_path / ".parrot")),
        shell=ShellConfig(executable="/bin/sh"),
        editor=EditorConfig(command="true"),
        logging=LoggingConfig(level="DEBUG", file=str(tmp_path / "test.log")),
    )


@pytest.fixture
def store(tmp_path):
    store = SnapshotStore(tmp_path / ".parrot")
    store.initialize()
    return store


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)
