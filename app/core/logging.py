# -*- coding: utf-8 -*-
import logging
import sys
from pathlib import Path

from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_HANDLER_NAME = "lms-console"

# 외부 라이브러리 로그는 WARNING 이상만 (SQL, Gemini HTTP 호출)
NOISY_LOGGERS = ("sqlalchemy.engine", "google_genai", "httpx", "httpcore")


def resolve_log_level() -> int:
    """LOG_LEVEL 환경 변수 우선, 없으면 environment 기준"""
    if settings.log_level:
        return logging.getLevelName(settings.log_level.upper())
    return logging.DEBUG if settings.environment == "development" else logging.INFO


def setup_logging():
    """로깅 설정 (여러 번 호출해도 핸들러는 한 번만 추가)"""
    log_level = resolve_log_level()
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not any(h.get_name() == CONSOLE_HANDLER_NAME for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        console_handler.set_name(CONSOLE_HANDLER_NAME)
        root_logger.addHandler(console_handler)

        # 파일 핸들러 (프로덕션)
        if settings.environment == "production":
            log_dir = Path(settings.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_dir / "app.log", encoding="utf-8")
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.INFO)
            root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
