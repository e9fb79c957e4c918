# tests/test_report.py
"""推薦文の整形と集計表のテスト"""

from __future__ import annotations

import pytest

from whenmeet_core.config import DEFAULT_CONFIG
from whenmeet_core.domain.grid import Grid
from whenmeet_core.domain.models import Segment
from whenmeet_core.overlap.engine import segment_all
from whenmeet_core.reporting.report import (
    build_overlap_table,
    build_recommendation,
    build_segment_table,
    busy_level,
    format_recommendation,
    format_segments,
    generate_recommendation,
    recommend,
)
from whenmeet_core.validation.validator import ValidationError

from conftest import full_grid, make_grid


class TestFormatRecommendation:
    def test_none_message_mentions_min_duration(self):
        msg = format_recommendation(None, 3, 2)
        assert "2時間以上" in msg

    def test_everyone_free(self):
        seg = Segment(day=0, start_hour=11, end_hour=23, busy_count=0)
        msg = format_recommendation(seg, 2)
        assert "月曜日" in msg
        assert "11時〜24時" in msg
        assert "13時間" in msg
        assert "全員空いています" in msg

    def test_one_busy(self):
        seg = Segment(day=2, start_hour=9, end_hour=10, busy_count=1)
        msg = format_recommendation(seg, 4)
        assert "水曜日" in msg
        assert "9時〜11時" in msg
        assert "2時間" in msg
        assert "3人空き（1人予定あり）" in msg

    def test_many_busy(self):
        seg = Segment(day=6, start_hour=0, end_hour=23, busy_count=3)
        msg = format_recommendation(seg, 3)
        assert "日曜日" in msg
        assert "0人空き（3人予定あり）" in msg

    def test_busy_count_above_total_rejected(self):
        seg = Segment(day=0, start_hour=0, end_hour=3, busy_count=5)
        with pytest.raises(ValidationError):
            format_recommendation(seg, 2)


class TestBuildRecommendation:
    def test_fields(self):
        seg = Segment(day=4, start_hour=18, end_hour=21, busy_count=1)
        rec = build_recommendation(seg, 3)
        assert rec.day == 4
        assert rec.day_name == "金曜日"
        assert rec.start_hour == 18
        assert rec.end_hour_exclusive == 22
        assert rec.duration_hours == 4
        assert rec.busy_count == 1
        assert rec.free_count == 2
        assert rec.total_participants == 3
        assert rec.message == format_recommendation(seg, 3)

    def test_none(self):
        assert build_recommendation(None, 2) is None


class TestRecommend:
    def test_all_busy_three_people(self):
        rec = recommend([full_grid(), full_grid(), full_grid()])
        assert rec.busy_count == 3
        assert rec.free_count == 0
        assert rec.duration_hours == 24
        assert "3人予定あり" in rec.message

    def test_prefers_free_day(self):
        # 月曜は1人が終日予定あり、火曜は全員空き
        a = make_grid([(0, h) for h in range(24)])
        rec = recommend([a, Grid.empty()])
        assert rec.day == 1
        assert rec.busy_count == 0

    def test_no_result_message(self):
        alternating = make_grid([(d, h) for d in range(7) for h in range(0, 24, 2)])
        assert recommend([alternating]) is None
        assert generate_recommendation([alternating]) == format_recommendation(None, 1, 2)


class TestTables:
    def test_busy_level_buckets(self):
        assert [busy_level(n) for n in (0, 1, 2, 3, 10)] == ["neutral", "low", "mid", "high", "high"]

    def test_overlap_table_shape(self):
        df = build_overlap_table([make_grid([(3, 7)]), make_grid([(3, 7)])])
        assert df.shape == (7, 24)
        assert list(df.index) == list(DEFAULT_CONFIG.day_names)
        assert df.loc["木曜日", 7] == 2
        assert int(df.values.sum()) == 2

    def test_segment_table(self):
        grids = [make_grid([(0, 9), (0, 10)]), Grid.empty()]
        segs = segment_all(grids)
        df = build_segment_table(segs, len(grids))
        assert len(df) == len(segs)
        monday_busy = df[(df["day"] == "月曜日") & (df["busy_count"] == 1)]
        assert monday_busy.iloc[0]["start_hour"] == 9
        assert monday_busy.iloc[0]["end_hour"] == 11
        assert monday_busy.iloc[0]["free_count"] == 1
        assert monday_busy.iloc[0]["level"] == "low"

    def test_empty_segment_table_has_columns(self):
        df = build_segment_table([], 2)
        assert df.empty
        assert "busy_count" in df.columns

    def test_format_segments(self):
        segs = [
            Segment(day=0, start_hour=0, end_hour=0, busy_count=1),
            Segment(day=0, start_hour=1, end_hour=23, busy_count=0),
        ]
        lines = format_segments(segs)
        assert lines[0] == "月曜日 0時（予定あり1人）"
        assert lines[1] == "月曜日 1時〜24時（23時間、予定あり0人）"
