# tests/conftest.py
"""テスト共通のフィクスチャとグリッド生成ヘルパー"""

from __future__ import annotations

from typing import Iterable, Tuple

import pytest

from whenmeet_core.domain.grid import Grid
from whenmeet_core.io_layer.storage import MemoryStore, ScheduleRepository


def make_grid(busy: Iterable[Tuple[int, int]] = ()) -> Grid:
    """(day, hour) の組を予定ありにしたグリッド"""
    g = Grid.empty()
    for d, h in busy:
        g = g.set_cell(d, h, True)
    return g


def full_grid() -> Grid:
    return Grid.from_rows([[True] * 24 for _ in range(7)])


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def schedules(store):
    return ScheduleRepository(store)
