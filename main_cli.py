# main_cli.py
from __future__ import annotations

import argparse
from typing import List

from whenmeet_core.config import DEFAULT_CONFIG
from whenmeet_core.domain.grid import Grid
from whenmeet_core.domain.identity import nickname_to_id
from whenmeet_core.io_layer.storage import JsonFileStore, ScheduleRepository
from whenmeet_core.io_layer.xlsx_reader import XlsxReader
from whenmeet_core.logging import get_logger, setup_logging
from whenmeet_core.overlap.engine import segment_all, select_best
from whenmeet_core.overlap.legacy import find_two_party_slot, format_two_party_recommendation
from whenmeet_core.reporting.export_xlsx import export_result_xlsx
from whenmeet_core.reporting.report import (
    build_overlap_table,
    build_recommendation,
    build_segment_table,
    format_recommendation,
    format_segments,
)
from whenmeet_core.validation.validator import ValidationError, validate_min_duration


def parse_args(argv=None):
    cfg = DEFAULT_CONFIG
    p = argparse.ArgumentParser(description="週間の空き時間を重ねて、会う時間をおすすめする")
    p.add_argument("--schedule", nargs="*", default=[], help="参加者スケジュール xlsx（各シート=参加者）")
    p.add_argument("--store", default=cfg.storage.store_path, help="保存ファイル（JSON）")
    p.add_argument("--members", nargs="*", default=[], help="保存済みスケジュールを使う参加者のニックネーム")
    p.add_argument("--save", action="store_true", help="--schedule の内容を保存ファイルへ書き込む")
    p.add_argument("--min-duration", type=int, default=cfg.min_duration_hours, help="最短の連続時間（時間）")
    p.add_argument("--legacy", action="store_true", help="2人専用の旧ロジックで推薦する（非推奨）")
    p.add_argument("--segments", action="store_true", help="全区間を表示する")
    p.add_argument("--out", default=None, help="結果xlsxの出力先")
    p.add_argument("--log-level", default=cfg.log_level)
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    cfg = DEFAULT_CONFIG
    setup_logging(args.log_level)
    log = get_logger("whenmeet.cli")

    try:
        validate_min_duration(args.min_duration)
    except ValidationError as e:
        print(f"[ERROR] {e.message}")
        return 1

    # 保存先はここで生成して渡す
    schedules = ScheduleRepository(JsonFileStore(args.store), cfg.storage)

    names: List[str] = []
    grids: List[Grid] = []

    try:
        if args.schedule:
            from_xlsx = XlsxReader(cfg=cfg).read_schedule_files(args.schedule)
            for name, g in from_xlsx.items():
                names.append(name)
                grids.append(g)
                if args.save:
                    schedules.save_schedule(nickname_to_id(name), g)

        for nickname in args.members:
            g = schedules.load_schedule(nickname_to_id(nickname))
            if g is None:
                print(f"[WARN] 保存済みスケジュールがありません: {nickname}（空きとして扱います）")
                g = Grid.empty()
            names.append(nickname)
            grids.append(g)
    except (ValidationError, ValueError) as e:
        print(f"[ERROR] {getattr(e, 'message', e)}")
        return 1

    log.info("participants_loaded", participants=names)

    if args.legacy:
        if len(grids) != 2:
            print("[ERROR] --legacy は参加者がちょうど2人のときだけ使えます。")
            return 1
        longest = find_two_party_slot(grids[0], grids[1], args.min_duration)
        print(f"[RESULT] {format_two_party_recommendation(longest, args.min_duration, cfg.day_names)}")
        return 0 if longest is not None else 2

    try:
        segments = segment_all(grids)
    except ValidationError as e:
        print(f"[ERROR] {e.message}")
        return 1

    best = select_best(segments, args.min_duration)
    message = format_recommendation(best, len(grids), args.min_duration, cfg)

    if args.segments:
        for line in format_segments(segments, cfg):
            print(f"  {line}")

    if args.out:
        rec = build_recommendation(best, len(grids), args.min_duration, cfg)
        out_path = export_result_xlsx(
            args.out,
            build_overlap_table(grids, cfg),
            build_segment_table(segments, len(grids), cfg),
            rec,
            message,
            cfg,
        )
        print(f"[OUT] {out_path}")

    print(f"[RESULT] {message}")
    return 0 if best is not None else 2


if __name__ == "__main__":
    raise SystemExit(main())
