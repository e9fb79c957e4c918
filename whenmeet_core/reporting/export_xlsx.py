# whenmeet_core/reporting/export_xlsx.py
from __future__ import annotations

from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union

import pandas as pd
from dateutil import tz
from openpyxl.styles import PatternFill

from whenmeet_core.config import AppConfig, DEFAULT_CONFIG
from whenmeet_core.domain.models import Recommendation
from whenmeet_core.reporting.report import busy_level

LEVEL_FILLS = {
    "neutral": "FFFFFF",
    "low": "FEF9C3",
    "mid": "FED7AA",
    "high": "FCA5A5",
}


def _recommendation_df(rec: Optional[Recommendation], message: str, generated_at: str) -> pd.DataFrame:
    row = dict(message=message, generated_at=generated_at)
    if rec is not None:
        row.update(
            day=rec.day_name,
            start_hour=rec.start_hour,
            end_hour=rec.end_hour_exclusive,
            duration_hours=rec.duration_hours,
            busy_count=rec.busy_count,
            free_count=rec.free_count,
            total_participants=rec.total_participants,
        )
    return pd.DataFrame([row])


def _write(
    target: Union[str, BinaryIO],
    overlap_df: pd.DataFrame,
    segment_df: pd.DataFrame,
    rec: Optional[Recommendation],
    message: str,
    cfg: AppConfig,
) -> None:
    now = datetime.now(tz=tz.gettz(cfg.timezone_name))
    with pd.ExcelWriter(target, engine="openpyxl") as w:
        overlap_df.to_excel(w, sheet_name="overlap")
        segment_df.to_excel(w, sheet_name="segments", index=False)
        _recommendation_df(rec, message, now.isoformat(timespec="seconds")).to_excel(
            w, sheet_name="recommendation", index=False
        )

        # 人数に応じてセルを色分け（行1=ヘッダ、列A=曜日名）
        ws = w.sheets["overlap"]
        for r_idx, row in enumerate(overlap_df.itertuples(index=False), start=2):
            for c_idx, value in enumerate(row, start=2):
                color = LEVEL_FILLS[busy_level(int(value))]
                ws.cell(row=r_idx, column=c_idx).fill = PatternFill(
                    start_color=color, end_color=color, fill_type="solid"
                )


def export_result_xlsx(
    out_path: str,
    overlap_df: pd.DataFrame,
    segment_df: pd.DataFrame,
    rec: Optional[Recommendation],
    message: str,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> str:
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    _write(out_path, overlap_df, segment_df, rec, message, cfg)
    return out_path


def export_result_bytes(
    overlap_df: pd.DataFrame,
    segment_df: pd.DataFrame,
    rec: Optional[Recommendation],
    message: str,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> bytes:
    """Streamlitダウンロード用にメモリへ書き出す"""
    buf = BytesIO()
    _write(buf, overlap_df, segment_df, rec, message, cfg)
    return buf.getvalue()
