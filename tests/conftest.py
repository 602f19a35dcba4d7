"""Pytest fixtures for Bindwire tests."""

import logging
import os
from pathlib import Path
from typing import Annotated

import pytest

from bindwire.binding import ExecutorMode, ListenerMode, executor, listener, parameter
from bindwire.foundation.config import BindwireConfig, reset_config
from bindwire.foundation.logging import LOGGER_NAME
from bindwire.interception import Cell
from bindwire.manager import reset_managers_for_tests
from bindwire.registry import BindingRegistry


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep config files, env vars and global registries out of every test."""
    for var in list(os.environ):
        if var.startswith("BINDWIRE_"):
            monkeypatch.delenv(var)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)

    reset_config()
    reset_managers_for_tests()
    yield
    reset_config()
    reset_managers_for_tests()

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture
def registry() -> BindingRegistry:
    """A registry isolated from the process-wide container."""
    return BindingRegistry(config=BindwireConfig())


class Counter:
    """Counts via a Cell and keeps a derived total recomputed on change."""

    count: Annotated[Cell, listener("count")]
    total: Annotated[int, listener("count", mode=ListenerMode.UPDATE, executor="recompute")]

    def __init__(self, start: int = 0) -> None:
        self.count = Cell(start)
        self.total = 0
        self.calls = 0

    @executor("recompute")
    def recompute(self) -> int:
        self.calls += 1
        return self.count.get() * 10


class Operands:
    """Two parameter slots declared out of position order."""

    left: Annotated[int, parameter("sum", 1)]
    right: Annotated[int, parameter("sum", 0)]

    def __init__(self, left: int = 5, right: int = 7) -> None:
        self.left = left
        self.right = right


class Summer:
    """Collects the resolved inputs of the "sum" executor."""

    @executor("sum", mode=ExecutorMode.PARAMETERS)
    def sum(self, first: int, second: int) -> list[int]:
        return [first, second]


@pytest.fixture
def counter() -> Counter:
    return Counter()


@pytest.fixture
def operands() -> Operands:
    return Operands()


@pytest.fixture
def summer() -> Summer:
    return Summer()
