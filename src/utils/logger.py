"""
📁 src/utils/logger.py
=======================
구조화된 로깅 설정.

[역할] 앱 전체의 로깅 포맷과 핸들러를 통일합니다.
       모든 로그 줄에 현재 파이프라인 실행 ID(앞 8자리)를 붙여
       여러 번 실행한 로그가 섞여도 실행 단위로 구분할 수 있게 합니다.

사용법:
    from src.utils.logger import setup_logging, get_logger, set_run_id
    setup_logging()
    set_run_id(run_id)
    logger = get_logger(__name__)
    logger.info("인코딩 시작: %d건", n)
    # [2024-01-01 12:00:00] INFO     [3f2a9c1d] [src.features.builder:97] 인코딩 시작: 7043건
"""

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Optional

from config.settings import get_settings

_RUN_ID: ContextVar[str] = ContextVar("run_id", default="-")

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(run_id)s] [%(name)s:%(lineno)d] %(message)s"


class RunIdFilter(logging.Filter):
    """레코드에 run_id 속성을 채웁니다 (핸들러에 부착)"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            record.run_id = _RUN_ID.get()
        return True


def set_run_id(run_id: Optional[str]) -> None:
    """이후 로그에 찍힐 실행 ID. None 이면 '-'"""
    _RUN_ID.set(run_id[:8] if run_id else "-")


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    앱 시작 시 1회 호출. 콘솔 + (선택) 파일 로깅을 설정합니다.

    Args:
        level: 로그 레벨 (None 이면 설정값 LOG_LEVEL)
        log_file: 파일 경로 (None 이면 production 에서만 LOG_DIR/pipeline.log)
    """
    settings = get_settings()
    level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    fmt = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    run_filter = RunIdFilter()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(fmt)
    ch.addFilter(run_filter)
    root.addHandler(ch)

    if log_file is None and settings.ENV != "development":
        log_file = str(Path(settings.LOG_DIR) / "pipeline.log")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        fh.addFilter(run_filter)
        root.addHandler(fh)

    # 외부 라이브러리 로그 억제
    for lib in ("sqlalchemy.engine", "xgboost"):
        logging.getLogger(lib).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """모듈별 로거 반환. 관례: get_logger(__name__)"""
    return logging.getLogger(name)
