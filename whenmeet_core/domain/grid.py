# whenmeet_core/domain/grid.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from whenmeet_core.validation.validator import (
    DAYS_PER_WEEK,
    HOURS_PER_DAY,
    ShapeMismatch,
    validate_day_hour,
    validate_grid_rows,
)

Cells = Tuple[Tuple[bool, ...], ...]


def _round_div(num: int, den: int) -> int:
    """整数のみで num/den を四捨五入（.5 は +方向）"""
    return (2 * num + den) // (2 * den)


def _check_value(value) -> bool:
    # セルは予定あり/空きの2値のみ（"false" や 0 を暗黙に変換しない）
    if not isinstance(value, bool):
        raise ShapeMismatch(f"セルの値は True/False で指定してください: {value!r}")
    return value


def line_cells(from_day: int, from_hour: int, to_day: int, to_hour: int) -> List[Tuple[int, int]]:
    """
    2点間を直線で結んだときに通るセル（両端含む）。
    ステップ数は曜日差・時刻差の大きい方。ドラッグ中にポインタが
    サンプリングより速く動いたときの取りこぼしを埋める用途。
    """
    dd = to_day - from_day
    dh = to_hour - from_hour
    steps = max(abs(dd), abs(dh))
    if steps == 0:
        return [(from_day, from_hour)]
    return [
        (from_day + _round_div(dd * i, steps), from_hour + _round_div(dh * i, steps))
        for i in range(steps + 1)
    ]


@dataclass(frozen=True)
class Grid:
    """1人分の週間予定（7日×24時間、True=予定あり）"""
    cells: Cells

    def __post_init__(self):
        # どの生成経路でも形を保証する
        object.__setattr__(self, "cells", validate_grid_rows(self.cells))

    @classmethod
    def empty(cls) -> "Grid":
        return cls(tuple((False,) * HOURS_PER_DAY for _ in range(DAYS_PER_WEEK)))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[bool]]) -> "Grid":
        return cls(validate_grid_rows(rows))

    def to_rows(self) -> List[List[bool]]:
        return [list(row) for row in self.cells]

    def day(self, day: int) -> Tuple[bool, ...]:
        validate_day_hour(day, 0)
        return self.cells[day]

    def is_busy(self, day: int, hour: int) -> bool:
        validate_day_hour(day, hour)
        return self.cells[day][hour]

    def iter_cells(self) -> Iterator[Tuple[int, int, bool]]:
        for d, row in enumerate(self.cells):
            for h, v in enumerate(row):
                yield d, h, v

    def set_cell(self, day: int, hour: int, value: bool) -> "Grid":
        validate_day_hour(day, hour)
        value = _check_value(value)
        if self.cells[day][hour] == value:
            return self
        row = list(self.cells[day])
        row[hour] = value
        return Grid(self.cells[:day] + (tuple(row),) + self.cells[day + 1:])

    def paint_range(self, from_day: int, from_hour: int, to_day: int, to_hour: int, value: bool) -> "Grid":
        validate_day_hour(from_day, from_hour)
        validate_day_hour(to_day, to_hour)
        value = _check_value(value)
        rows = self.to_rows()
        for d, h in line_cells(from_day, from_hour, to_day, to_hour):
            rows[d][h] = value
        return Grid.from_rows(rows)

    def clear_all(self) -> "Grid":
        return Grid.empty()

    def busy_cell_count(self) -> int:
        return sum(sum(1 for v in row if v) for row in self.cells)


def create_empty() -> Grid:
    return Grid.empty()


def set_cell(grid: Grid, day: int, hour: int, value: bool) -> Grid:
    return grid.set_cell(day, hour, value)


def paint_range(grid: Grid, from_day: int, from_hour: int, to_day: int, to_hour: int, value: bool) -> Grid:
    return grid.paint_range(from_day, from_hour, to_day, to_hour, value)


def clear_all(grid: Grid) -> Grid:
    # 確認ダイアログはUI側の責務
    return grid.clear_all()


def busy_cell_count(grid: Grid) -> int:
    return grid.busy_cell_count()


def as_grid(value) -> Grid:
    """Grid またはそのままの入れ子リストを受け取り、検証済み Grid を返す"""
    if isinstance(value, Grid):
        return value
    return Grid.from_rows(value)
