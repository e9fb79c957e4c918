# tests/test_cli.py
"""コマンドライン入口の通しテスト"""

from __future__ import annotations

import pytest
from openpyxl import load_workbook

from main_cli import main
from whenmeet_core.config import DEFAULT_CONFIG
from whenmeet_core.domain.grid import Grid
from whenmeet_core.io_layer.xlsx_reader import XlsxReader

from conftest import full_grid, make_grid


@pytest.fixture
def week_file(tmp_path):
    grids = {"alice": make_grid([(0, h) for h in range(24)]), "bob": make_grid([(1, 3)])}
    return XlsxReader(cfg=DEFAULT_CONFIG).write_schedule_file(str(tmp_path / "week.xlsx"), grids)


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "store.json")


class TestMain:
    def test_recommendation_from_xlsx(self, week_file, store_path, capsys):
        code = main(["--schedule", week_file, "--store", store_path])
        out = capsys.readouterr().out
        assert code == 0
        # 月曜は alice が終日予定あり、火曜は bob が3時だけ → 水曜終日が最良
        assert "[RESULT]" in out
        assert "水曜日" in out
        assert "全員空いています" in out

    def test_save_then_use_members(self, week_file, store_path, capsys):
        assert main(["--schedule", week_file, "--store", store_path, "--save"]) == 0
        capsys.readouterr()
        code = main(["--store", store_path, "--members", "alice", "bob", "--segments"])
        out = capsys.readouterr().out
        assert code == 0
        assert "月曜日 0時〜24時（24時間、予定あり1人）" in out

    def test_unknown_member_treated_as_free(self, store_path, capsys):
        code = main(["--store", store_path, "--members", "nobody"])
        out = capsys.readouterr().out
        assert code == 0
        assert "[WARN]" in out

    def test_no_participants(self, store_path, capsys):
        assert main(["--store", store_path]) == 1
        assert "[ERROR]" in capsys.readouterr().out

    def test_invalid_min_duration(self, store_path, capsys):
        assert main(["--store", store_path, "--members", "a", "--min-duration", "0"]) == 1

    def test_no_result_exit_code(self, tmp_path, store_path, capsys):
        alternating = make_grid([(d, h) for d in range(7) for h in range(0, 24, 2)])
        path = XlsxReader(cfg=DEFAULT_CONFIG).write_schedule_file(str(tmp_path / "alt.xlsx"), {"x": alternating})
        assert main(["--schedule", path, "--store", store_path]) == 2
        assert "2時間以上" in capsys.readouterr().out

    def test_legacy_requires_two(self, week_file, store_path, capsys):
        assert main(["--schedule", week_file, "--store", store_path, "--members", "carol", "--legacy"]) == 1

    def test_legacy_two_party(self, week_file, store_path, capsys):
        with pytest.deprecated_call():
            code = main(["--schedule", week_file, "--store", store_path, "--legacy"])
        assert code == 0
        # 月曜は alice が終日予定あり → 最初に現れる24時間の空きは水曜
        assert "水曜日 0時〜24時" in capsys.readouterr().out

    def test_legacy_without_common_slot_exits_2(self, tmp_path, store_path, capsys):
        path = XlsxReader(cfg=DEFAULT_CONFIG).write_schedule_file(
            str(tmp_path / "busy.xlsx"), {"a": full_grid(), "b": full_grid()}
        )
        with pytest.deprecated_call():
            code = main(["--schedule", path, "--store", store_path, "--legacy"])
        assert code == 2
        assert "ありません" in capsys.readouterr().out

    def test_export(self, tmp_path, store_path, capsys):
        path = XlsxReader(cfg=DEFAULT_CONFIG).write_schedule_file(
            str(tmp_path / "busy.xlsx"), {"a": full_grid(), "b": Grid.empty()}
        )
        out_path = str(tmp_path / "out" / "result.xlsx")
        assert main(["--schedule", path, "--store", store_path, "--out", out_path]) == 0
        assert load_workbook(out_path).sheetnames == ["overlap", "segments", "recommendation"]
        assert "1人空き（1人予定あり）" in capsys.readouterr().out
