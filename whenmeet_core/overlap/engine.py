# whenmeet_core/overlap/engine.py
from __future__ import annotations

from typing import List, Optional, Sequence

from whenmeet_core.domain.grid import Grid, as_grid
from whenmeet_core.domain.models import Segment
from whenmeet_core.logging import get_logger
from whenmeet_core.validation.validator import (
    DAYS_PER_WEEK,
    HOURS_PER_DAY,
    EmptyInput,
    ShapeMismatch,
)

log = get_logger(__name__)

DEFAULT_MIN_DURATION_HOURS = 2


def compute_busy_counts(grids: Sequence[Grid]) -> List[List[int]]:
    """
    counts[day][hour] = その時間に予定ありの人数。
    先頭（index 0）が本人という慣習は呼び出し側の表示用で、ここでは区別しない。
    """
    if not grids:
        raise EmptyInput("比較するスケジュールがありません（1件以上必要）。")

    checked: List[Grid] = []
    for i, g in enumerate(grids):
        try:
            checked.append(as_grid(g))
        except ShapeMismatch as e:
            raise ShapeMismatch(f"{i}番目のスケジュール: {e.message}") from e

    counts = [[0] * HOURS_PER_DAY for _ in range(DAYS_PER_WEEK)]
    for g in checked:
        for d, h, busy in g.iter_cells():
            if busy:
                counts[d][h] += 1
    return counts


def segment_day(busy_counts_for_day: Sequence[int], day: int = 0) -> List[Segment]:
    """
    1日24コマの人数列をランレングス圧縮する。
    人数が前のコマから変わった所で区間を切り替え、23時で最後の区間を閉じる。
    出力は 0〜23 時を隙間・重なりなく覆う。
    """
    if len(busy_counts_for_day) != HOURS_PER_DAY:
        raise ShapeMismatch(f"1日分の人数列の長さが24ではありません: {len(busy_counts_for_day)}")

    segments: List[Segment] = []
    start = 0
    current = busy_counts_for_day[0]
    for hour in range(1, HOURS_PER_DAY):
        v = busy_counts_for_day[hour]
        if v != current:
            segments.append(Segment(day=day, start_hour=start, end_hour=hour - 1, busy_count=current))
            start = hour
            current = v
    segments.append(Segment(day=day, start_hour=start, end_hour=HOURS_PER_DAY - 1, busy_count=current))
    return segments


def segment_all(grids: Sequence[Grid]) -> List[Segment]:
    counts = compute_busy_counts(grids)
    out: List[Segment] = []
    for d in range(DAYS_PER_WEEK):
        out.extend(segment_day(counts[d], day=d))
    return out


def _rank_key(seg: Segment):
    # 予定あり人数が少ないほど良い → 同数なら長いほど良い
    return (seg.busy_count, -seg.duration)


def rank_segments(segments: Sequence[Segment], min_duration_hours: int = DEFAULT_MIN_DURATION_HOURS) -> List[Segment]:
    """
    最短時間を満たす区間を良い順に並べる。
    sorted は安定なので、同順位は走査順（曜日→時刻の昇順）のまま残る。
    """
    eligible = [s for s in segments if s.duration >= min_duration_hours]
    return sorted(eligible, key=_rank_key)


def select_best(segments: Sequence[Segment], min_duration_hours: int = DEFAULT_MIN_DURATION_HOURS) -> Optional[Segment]:
    eligible = [s for s in segments if s.duration >= min_duration_hours]
    if not eligible:
        log.debug("no_eligible_segment", total=len(segments), min_duration_hours=min_duration_hours)
        return None
    # min は同順位の中で最初に現れたものを返す
    best = min(eligible, key=_rank_key)
    log.debug(
        "best_segment_selected",
        day=best.day,
        start_hour=best.start_hour,
        end_hour=best.end_hour,
        busy_count=best.busy_count,
        candidates=len(eligible),
    )
    return best
