# whenmeet_core/reporting/report.py
from __future__ import annotations

from typing import List, Optional, Sequence

import pandas as pd

from whenmeet_core.config import AppConfig, DEFAULT_CONFIG
from whenmeet_core.domain.grid import Grid
from whenmeet_core.domain.models import Recommendation, Segment
from whenmeet_core.overlap.engine import compute_busy_counts, segment_all, select_best
from whenmeet_core.validation.validator import ValidationError


def busy_level(busy_count: int) -> str:
    """表示用の色分け（0=neutral, 1=low, 2=mid, 3人以上=high）"""
    if busy_count <= 0:
        return "neutral"
    if busy_count == 1:
        return "low"
    if busy_count == 2:
        return "mid"
    return "high"


def _hour_range(seg: Segment) -> str:
    return f"{seg.start_hour}時〜{seg.end_hour_exclusive}時"


def no_result_message(min_duration_hours: int) -> str:
    return f"{min_duration_hours}時間以上の共通の空き時間がありません。"


def format_recommendation(
    best: Optional[Segment],
    total_participants: int,
    min_duration_hours: int = DEFAULT_CONFIG.min_duration_hours,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> str:
    if best is None:
        return no_result_message(min_duration_hours)

    if not (0 <= best.busy_count <= total_participants):
        raise ValidationError(
            f"予定あり人数が参加人数の範囲外です: busy={best.busy_count} total={total_participants}"
        )

    free_count = total_participants - best.busy_count
    head = f"おすすめ: {cfg.day_names[best.day]} {_hour_range(best)}（{best.duration}時間）"
    if best.busy_count == 0:
        return f"{head} 全員空いています！"
    if best.busy_count == 1:
        return f"{head} {free_count}人空き（1人予定あり）"
    return f"{head} {free_count}人空き（{best.busy_count}人予定あり）"


def build_recommendation(
    best: Optional[Segment],
    total_participants: int,
    min_duration_hours: int = DEFAULT_CONFIG.min_duration_hours,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Optional[Recommendation]:
    if best is None:
        return None
    return Recommendation(
        day=best.day,
        day_name=cfg.day_names[best.day],
        start_hour=best.start_hour,
        end_hour_exclusive=best.end_hour_exclusive,
        duration_hours=best.duration,
        busy_count=best.busy_count,
        free_count=total_participants - best.busy_count,
        total_participants=total_participants,
        message=format_recommendation(best, total_participants, min_duration_hours, cfg),
    )


def recommend(
    grids: Sequence[Grid],
    min_duration_hours: int = DEFAULT_CONFIG.min_duration_hours,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Optional[Recommendation]:
    best = select_best(segment_all(grids), min_duration_hours)
    return build_recommendation(best, len(grids), min_duration_hours, cfg)


def generate_recommendation(
    grids: Sequence[Grid],
    min_duration_hours: int = DEFAULT_CONFIG.min_duration_hours,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> str:
    rec = recommend(grids, min_duration_hours, cfg)
    return rec.message if rec else no_result_message(min_duration_hours)


def format_segments(segments: Sequence[Segment], cfg: AppConfig = DEFAULT_CONFIG) -> List[str]:
    out = []
    for s in segments:
        day_name = cfg.day_names[s.day]
        if s.duration == 1:
            out.append(f"{day_name} {s.start_hour}時（予定あり{s.busy_count}人）")
        else:
            out.append(f"{day_name} {_hour_range(s)}（{s.duration}時間、予定あり{s.busy_count}人）")
    return out


def build_overlap_table(grids: Sequence[Grid], cfg: AppConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    counts = compute_busy_counts(grids)
    return pd.DataFrame(counts, index=list(cfg.day_names), columns=list(range(cfg.layout.hours_per_day)))


def build_segment_table(
    segments: Sequence[Segment],
    total_participants: int,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    rows = []
    for s in segments:
        rows.append(dict(
            day=cfg.day_names[s.day],
            start_hour=s.start_hour,
            end_hour=s.end_hour_exclusive,
            duration=s.duration,
            busy_count=s.busy_count,
            free_count=total_participants - s.busy_count,
            level=busy_level(s.busy_count),
        ))
    return pd.DataFrame(
        rows,
        columns=["day", "start_hour", "end_hour", "duration", "busy_count", "free_count", "level"],
    )
