# whenmeet_core/io_layer/xlsx_reader.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping

from openpyxl import Workbook, load_workbook
from openpyxl.utils import column_index_from_string, get_column_letter

from whenmeet_core.config import AppConfig
from whenmeet_core.domain.grid import Grid
from whenmeet_core.validation.validator import ShapeMismatch

FREE_MARKS = ("", "0", "false", "free", "-")


def _col_range_indices(col_start: str, col_end: str) -> List[int]:
    s = column_index_from_string(col_start)
    e = column_index_from_string(col_end)
    return list(range(s, e + 1))


def _cell_to_busy(v) -> bool:
    """空欄・0・False は空き、それ以外の印（1, x, ○ など）は予定あり"""
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return v != 0
    return str(v).strip().lower() not in FREE_MARKS


@dataclass(frozen=True)
class XlsxReader:
    """
    1ファイルに複数人。各シート=参加者名。
    行2=月曜 〜 行8=日曜、列B=0時 〜 列Y=23時。
    """
    cfg: AppConfig

    def _slot_cols(self) -> List[int]:
        lay = self.cfg.layout
        cols = _col_range_indices(lay.xlsx_col_start, lay.xlsx_col_end)
        if len(cols) != lay.hours_per_day:
            raise ShapeMismatch(
                f"列数が{lay.hours_per_day}ではありません。{lay.xlsx_col_start}〜{lay.xlsx_col_end}の設定を確認してください。"
            )
        return cols

    def read_schedule_file(self, schedule_file: str) -> Dict[str, Grid]:
        if not Path(schedule_file).exists():
            raise ValueError(f"スケジュールファイルが見つかりません: {schedule_file}")

        lay = self.cfg.layout
        slot_cols = self._slot_cols()
        wb = load_workbook(schedule_file, data_only=True)

        out: Dict[str, Grid] = {}
        for sheet_name in wb.sheetnames:
            ws = wb[sheet_name]
            name = str(sheet_name).strip()

            # 曜日行・時刻列が範囲内に収まっているか（はみ出しは切り捨てずエラー）
            last_row = lay.xlsx_row_start + lay.days_per_week - 1
            if ws.max_column > slot_cols[-1] or ws.max_row > last_row:
                raise ShapeMismatch(
                    f"{schedule_file}:{name} が7×24の範囲を超えています（{ws.max_row}行×{ws.max_column}列）"
                )

            rows = []
            for d in range(lay.days_per_week):
                r = lay.xlsx_row_start + d
                rows.append([_cell_to_busy(ws.cell(row=r, column=c).value) for c in slot_cols])
            out[name] = Grid.from_rows(rows)
        return out

    def read_schedule_files(self, schedule_files: List[str]) -> Dict[str, Grid]:
        """複数ファイルをまとめる（同じ参加者名が重複したら後勝ち）"""
        merged: Dict[str, Grid] = {}
        for f in schedule_files:
            merged.update(self.read_schedule_file(f))
        return merged

    def write_schedule_file(self, out_path: str, grids: Mapping[str, Grid]) -> str:
        """読み込みと同じレイアウトで書き出す（空のGridを渡せば入力用テンプレートになる）"""
        lay = self.cfg.layout
        slot_cols = self._slot_cols()

        wb = Workbook()
        wb.remove(wb.active)
        for name, grid in grids.items():
            ws = wb.create_sheet(title=name)
            ws.cell(row=1, column=1, value="曜日 / 時刻")
            for h, c in enumerate(slot_cols):
                ws.cell(row=1, column=c, value=h)
            for d in range(lay.days_per_week):
                r = lay.xlsx_row_start + d
                ws.cell(row=r, column=1, value=self.cfg.day_names[d])
                for h, c in enumerate(slot_cols):
                    if grid.cells[d][h]:
                        ws.cell(row=r, column=c, value=1)
            ws.column_dimensions[get_column_letter(1)].width = 12

        Path(out_path).parent.mkdir(parents=True, exist_ok=True)
        wb.save(out_path)
        return out_path
