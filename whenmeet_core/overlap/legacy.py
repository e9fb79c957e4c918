# whenmeet_core/overlap/legacy.py
"""
2人専用の旧推薦ロジック。

「2人とも空いている」最長区間だけを見て、部分的に空いている区間は
順位付けに使わない。N人版（engine.py）が正式な一般化であり、こちらは
製品側の確認が取れるまで互換のために残している（非推奨）。
"""
from __future__ import annotations

import warnings
from typing import List, Optional, Sequence

from whenmeet_core.config import DEFAULT_CONFIG
from whenmeet_core.domain.grid import Grid, as_grid
from whenmeet_core.domain.models import Segment
from whenmeet_core.logging import get_logger
from whenmeet_core.validation.validator import DAYS_PER_WEEK, HOURS_PER_DAY

log = get_logger(__name__)


def _deprecated(name: str) -> None:
    warnings.warn(
        f"{name} は2人専用の旧ロジックです。overlap.engine の N人版を使ってください。",
        DeprecationWarning,
        stacklevel=3,
    )
    log.warning("legacy_two_party_policy_used", function=name)


def classify_cells(schedule1: Grid, schedule2: Grid) -> List[List[int]]:
    """0=2人とも空き, 1=どちらか1人が予定あり, 2=2人とも予定あり"""
    g1 = as_grid(schedule1)
    g2 = as_grid(schedule2)
    return [[int(a) + int(b) for a, b in zip(g1.day(d), g2.day(d))] for d in range(DAYS_PER_WEEK)]


def find_common_free_slots(schedule1: Grid, schedule2: Grid) -> List[Segment]:
    levels = classify_cells(schedule1, schedule2)
    slots: List[Segment] = []
    for d in range(DAYS_PER_WEEK):
        start = -1
        for h in range(HOURS_PER_DAY):
            if levels[d][h] == 0:
                if start == -1:
                    start = h
            elif start != -1:
                slots.append(Segment(day=d, start_hour=start, end_hour=h - 1, busy_count=0))
                start = -1
        # 23時まで空きが続いた場合
        if start != -1:
            slots.append(Segment(day=d, start_hour=start, end_hour=HOURS_PER_DAY - 1, busy_count=0))
    return slots


def find_longest_slot(free_slots: Sequence[Segment]) -> Optional[Segment]:
    longest: Optional[Segment] = None
    for s in free_slots:
        if longest is None or s.duration > longest.duration:
            longest = s
    return longest


def find_two_party_slot(
    schedule1: Grid,
    schedule2: Grid,
    min_duration_hours: int = 2,
) -> Optional[Segment]:
    """2人とも空いていて min_duration_hours 以上続く最長区間。無ければ None"""
    _deprecated("find_two_party_slot")
    valid = [s for s in find_common_free_slots(schedule1, schedule2) if s.duration >= min_duration_hours]
    return find_longest_slot(valid)


def format_two_party_recommendation(
    longest: Optional[Segment],
    min_duration_hours: int = 2,
    day_names: Sequence[str] = DEFAULT_CONFIG.day_names,
) -> str:
    if longest is None:
        return f"2人とも空いている時間帯がありません（{min_duration_hours}時間以上必要）。"

    day_name = day_names[longest.day]
    if longest.duration >= 2:
        return (
            f"おすすめ: {day_name} {longest.start_hour}時〜{longest.end_hour_exclusive}時に会いましょう！"
            f"（{longest.duration}時間空き）"
        )
    # 最短時間を1にしたときのみ
    return f"おすすめ: {day_name} {longest.start_hour}時に会いましょう！"


def generate_two_party_recommendation(
    schedule1: Grid,
    schedule2: Grid,
    min_duration_hours: int = 2,
    day_names: Sequence[str] = DEFAULT_CONFIG.day_names,
) -> str:
    longest = find_two_party_slot(schedule1, schedule2, min_duration_hours)
    return format_two_party_recommendation(longest, min_duration_hours, day_names)
