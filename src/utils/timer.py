"""
📁 src/utils/timer.py
======================
실행 시간 측정 유틸리티.

[패턴] Decorator / Context Manager
  - @timer("데이터 파이프라인"): 함수 전체 소요 시간 로깅
  - with timed("분할", timings): 블록 소요 시간 로깅 + timings[label] 에 기록

사용법:
    timings = {}
    with timed("모델 학습", timings):
        handle = adapter.train(train)
    timings   # {"모델 학습": 1.84}
"""

import functools
import time
from contextlib import contextmanager
from typing import Optional

from src.utils.logger import get_logger

logger = get_logger(__name__)


@contextmanager
def timed(label: str, timings: Optional[dict] = None):
    """블록 실행 시간 측정. 예외가 나도 소요 시간은 남기고 그대로 전파합니다."""
    start = time.perf_counter()
    logger.info("[TIMER] %s 시작...", label)
    try:
        yield
    except Exception:
        logger.error("[TIMER] %s 실패: %.1f초", label, time.perf_counter() - start)
        raise
    finally:
        if timings is not None:
            timings[label] = round(time.perf_counter() - start, 3)
    logger.info("[TIMER] %s 완료: %.1f초", label, time.perf_counter() - start)


def timer(label: str = ""):
    """함수용 데코레이터 버전"""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with timed(label or func.__name__):
                return func(*args, **kwargs)
        return wrapper
    return decorator
