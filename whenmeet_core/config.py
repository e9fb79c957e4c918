# whenmeet_core/config.py
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class GridLayoutConfig:
    """週間グリッドの形（固定）とxlsx上の配置"""
    days_per_week: int = 7
    hours_per_day: int = 24

    # xlsxスケジュールの列仕様（B=0時 〜 Y=23時）
    xlsx_col_start: str = "B"
    xlsx_col_end: str = "Y"
    xlsx_row_start: int = 2  # 行2が月曜


@dataclass(frozen=True)
class StorageConfig:
    store_path: str = "data/whenmeet.json"
    schedule_key_prefix: str = "schedule:"
    group_key_prefix: str = "group:"
    invitation_key_prefix: str = "invitations:"


@dataclass(frozen=True)
class AppConfig:
    # 月曜始まりの曜日名
    day_names: Tuple[str, ...] = ("月曜日", "火曜日", "水曜日", "木曜日", "金曜日", "土曜日", "日曜日")

    # 推薦対象とする最短の連続時間
    min_duration_hours: int = 2

    # エクスポートの生成日時スタンプ用（時刻変換はしない）
    timezone_name: str = "Asia/Seoul"

    log_level: str = "INFO"
    log_json: bool = False

    layout: GridLayoutConfig = GridLayoutConfig()
    storage: StorageConfig = StorageConfig()


DEFAULT_CONFIG = AppConfig()
