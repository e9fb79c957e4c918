# whenmeet_core/logging.py
from __future__ import annotations

import logging
import sys

import structlog

from whenmeet_core.config import DEFAULT_CONFIG


def setup_logging(level: str | None = None, json: bool | None = None) -> None:
    """CLI/GUI の起動時に1回だけ呼ぶ。"""
    level_name = (level or DEFAULT_CONFIG.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    use_json = DEFAULT_CONFIG.log_json if json is None else json

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.processors.JSONRenderer()
                if use_json
                else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
            ),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # 出力先は標準 logging 側（stderr）に任せる
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    logging.getLogger().setLevel(log_level)

    # openpyxl / streamlit の雑多なログは抑える
    logging.getLogger("openpyxl").setLevel(logging.WARNING)
    logging.getLogger("streamlit").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
