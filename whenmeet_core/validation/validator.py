# whenmeet_core/validation/validator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24


@dataclass(frozen=True)
class ValidationError(Exception):
    message: str


class ShapeMismatch(ValidationError):
    """7×24 の真偽値グリッドではない入力"""


class EmptyInput(ValidationError):
    """参加者（グリッド）が1件もない"""


class CellOutOfRange(ValidationError):
    """曜日・時刻インデックスが範囲外"""


def validate_day_hour(day: int, hour: int) -> None:
    if not (0 <= day < DAYS_PER_WEEK):
        raise CellOutOfRange(f"曜日インデックスが範囲外です: {day}（0〜6）")
    if not (0 <= hour < HOURS_PER_DAY):
        raise CellOutOfRange(f"時刻インデックスが範囲外です: {hour}（0〜23）")


def validate_grid_rows(rows: Any) -> Tuple[Tuple[bool, ...], ...]:
    """
    入れ子シーケンスを 7×24 の bool タプルへ変換する。
    形が違う・bool 以外の値がある場合は ShapeMismatch（切り詰め・補完はしない）。
    """
    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        raise ShapeMismatch(f"グリッドは7行のシーケンスである必要があります: {type(rows).__name__}")
    if len(rows) != DAYS_PER_WEEK:
        raise ShapeMismatch(f"グリッドの行数が7ではありません: {len(rows)}")

    out: List[Tuple[bool, ...]] = []
    for d, row in enumerate(rows):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise ShapeMismatch(f"{d}行目がシーケンスではありません: {type(row).__name__}")
        if len(row) != HOURS_PER_DAY:
            raise ShapeMismatch(f"{d}行目の列数が24ではありません: {len(row)}")
        for h, v in enumerate(row):
            # 0/1 などの真偽値以外は受け付けない
            if not isinstance(v, bool):
                raise ShapeMismatch(f"セル({d}, {h})が真偽値ではありません: {v!r}")
        out.append(tuple(row))
    return tuple(out)


def validate_min_duration(min_duration_hours: int) -> None:
    if min_duration_hours < 1 or min_duration_hours > HOURS_PER_DAY:
        raise ValidationError(f"最短時間は1〜24時間で指定してください: {min_duration_hours}")


def validate_required(fields: dict) -> None:
    missing = [k for k, v in fields.items() if v is None or (isinstance(v, str) and not v.strip())]
    if missing:
        raise ValidationError(f"必須項目がありません: {', '.join(missing)}")
