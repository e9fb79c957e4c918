# whenmeet_core/gui/app.py
from __future__ import annotations

from pathlib import Path
import sys
from typing import List

import pandas as pd
import streamlit as st

# Streamlitは実行ディレクトリが変わるため、リポジトリルートをパスに追加する。
ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from whenmeet_core.config import AppConfig, DEFAULT_CONFIG
from whenmeet_core.domain.grid import Grid
from whenmeet_core.domain.identity import nickname_to_id
from whenmeet_core.groups.service import GroupService, load_member_grids
from whenmeet_core.io_layer.storage import JsonFileStore, ScheduleRepository
from whenmeet_core.logging import setup_logging
from whenmeet_core.overlap.engine import segment_all, select_best
from whenmeet_core.reporting.export_xlsx import LEVEL_FILLS, export_result_bytes
from whenmeet_core.reporting.report import (
    build_overlap_table,
    build_recommendation,
    build_segment_table,
    busy_level,
    format_recommendation,
)
from whenmeet_core.validation.validator import ValidationError


def grid_to_df(grid: Grid, cfg: AppConfig) -> pd.DataFrame:
    return pd.DataFrame(grid.to_rows(), index=list(cfg.day_names), columns=[str(h) for h in range(cfg.layout.hours_per_day)])


def df_to_grid(df: pd.DataFrame) -> Grid:
    # data_editor は numpy.bool_ を返すので bool に戻す
    return Grid.from_rows([[bool(v) for v in row] for row in df.itertuples(index=False)])


def _color_cell(v) -> str:
    return f"background-color: #{LEVEL_FILLS[busy_level(int(v))]}"


@st.cache_resource
def _open_store(path: str) -> JsonFileStore:
    # 保存先はプロセスごとに1つ（セッション間で共有）
    return JsonFileStore(path)


def _show_comparison(names: List[str], grids: List[Grid], cfg: AppConfig, min_duration: int) -> None:
    try:
        segments = segment_all(grids)
    except ValidationError as e:
        st.error(e.message)
        return

    best = select_best(segments, min_duration)
    message = format_recommendation(best, len(grids), min_duration, cfg)
    overlap_df = build_overlap_table(grids, cfg)
    segment_df = build_segment_table(segments, len(grids), cfg)

    st.subheader(f"重ね合わせ（{len(grids)}人: {', '.join(names)}）")
    st.dataframe(overlap_df.style.map(_color_cell), use_container_width=True)
    st.caption("白=全員空き / 黄=1人予定あり / 橙=2人 / 赤=3人以上")

    if best is None:
        st.warning(message)
    else:
        st.success(message)

    with st.expander("全区間"):
        st.dataframe(segment_df, use_container_width=True)

    rec = build_recommendation(best, len(grids), min_duration, cfg)
    st.download_button(
        label="結果xlsxをダウンロード",
        data=export_result_bytes(overlap_df, segment_df, rec, message, cfg),
        file_name="whenmeet_result.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


def main():
    cfg = DEFAULT_CONFIG
    setup_logging(cfg.log_level)

    store = _open_store(cfg.storage.store_path)
    schedules = ScheduleRepository(store, cfg.storage)
    groups = GroupService(store, cfg.storage)

    st.title("いつ会う？ 週間空き時間の重ね合わせ")

    nickname = st.text_input("ニックネーム").strip()
    if not nickname:
        st.info("ニックネームを入力してください。")
        st.stop()
    my_id = nickname_to_id(nickname)

    if st.session_state.get("nickname") != nickname:
        st.session_state["nickname"] = nickname
        st.session_state["grid"] = schedules.load_schedule(my_id) or Grid.empty()

    st.header("自分の予定（チェック=予定あり）")
    edited = st.data_editor(grid_to_df(st.session_state["grid"], cfg), use_container_width=True)
    my_grid = df_to_grid(edited)
    st.session_state["grid"] = my_grid
    st.caption(f"予定ありのコマ: {my_grid.busy_cell_count()}")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("保存"):
            schedules.save_schedule(my_id, my_grid)
            st.success("保存しました。")
    with col2:
        confirm = st.checkbox("全消去を確認")
        if st.button("全消去", disabled=not confirm):
            st.session_state["grid"] = my_grid.clear_all()
            st.rerun()

    min_duration = int(st.number_input(
        "最短の連続時間（時間）", min_value=1, max_value=24, value=cfg.min_duration_hours
    ))

    st.header("友達と比較")
    friends = [f.strip() for f in st.text_area("友達のニックネーム（改行区切り）").splitlines() if f.strip()]
    if friends:
        names = [nickname]
        grids = [my_grid]
        for f in friends:
            g = schedules.load_schedule(nickname_to_id(f))
            if g is None:
                st.warning(f"{f} の予定が保存されていません。")
                continue
            names.append(f)
            grids.append(g)
        if len(grids) > 1:
            _show_comparison(names, grids, cfg, min_duration)

    st.header("グループ")
    for inv in groups.list_invitations(nickname):
        c1, c2, c3 = st.columns([3, 1, 1])
        c1.write(f"{inv.group_name}（作成者: {inv.creator}）")
        if c2.button("参加", key=f"acc-{inv.group_id}"):
            groups.respond(inv.group_id, nickname, True)
            st.rerun()
        if c3.button("辞退", key=f"dec-{inv.group_id}"):
            groups.respond(inv.group_id, nickname, False)
            st.rerun()

    with st.form("create_group"):
        gname = st.text_input("グループ名")
        gmembers = st.text_input("メンバー（カンマ区切り）")
        if st.form_submit_button("グループを作成"):
            try:
                groups.create_group(gname, nickname, gmembers.split(","))
                st.success("グループを作成し、招待を送りました。")
            except ValidationError as e:
                st.error(e.message)

    my_groups = groups.list_groups(nickname)
    if my_groups:
        labels = {f"{g.name}（{g.creator}）": g for g in my_groups}
        picked = st.selectbox("グループの予定を見る", list(labels.keys()))
        if picked:
            names, grids = load_member_grids(labels[picked], schedules)
            _show_comparison(names, grids, cfg, min_duration)


if __name__ == "__main__":
    main()
