"""
📁 config/settings.py
=====================
환경별 설정 관리.

[패턴] Singleton — @lru_cache로 앱 전체에서 하나의 인스턴스만 유지
[역할] .env 파일과 환경변수에서 설정값을 로드합니다.
       웨어하우스의 암묵적 세션 상태(current warehouse/database) 대신
       각 컴포넌트 생성 시 이 설정 객체를 명시적으로 넘깁니다.

사용법:
    from config.settings import get_settings
    s = get_settings()
    print(s.TRAIN_FRACTION)
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

# 프로젝트 루트 (이 파일 기준 한 단계 위)
ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """앱 전체 설정. 우선순위: 환경변수 > .env > 기본값"""

    # ── 기본 ──
    APP_NAME: str = "telecom-churn"
    APP_VERSION: str = "0.1.0"
    ENV: str = "development"          # development | production
    DEBUG: bool = True

    # ── 데이터베이스 (원본/피처/예측 테이블 적재용) ──
    DATABASE_URL: str = f"sqlite:///{ROOT / 'data' / 'churn.db'}"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600

    # ── 데이터 경로 ──
    DATA_RAW: str = str(ROOT / "data" / "01_raw")
    DATA_MODEL_INPUT: str = str(ROOT / "data" / "05_model_input")

    # ── 모델 경로 ──
    MODEL_REGISTRY: str = str(ROOT / "models" / "registry")

    # ── 분할 ──
    TRAIN_FRACTION: float = 0.8       # SAMPLE(80) 에 대응
    SPLIT_SEED: Optional[int] = None  # None 이면 재현 불가 샘플링
    EXACT_SPLIT: bool = False         # True 면 정확한 개수 분할

    # ── 병렬 처리 ──
    ENCODE_WORKERS: int = 1
    PREDICT_MAX_WORKERS: int = 4
    PREDICT_TIMEOUT_SECONDS: float = 30.0
    EVAL_WORKERS: int = 1

    # ── 로깅 / 리포트 ──
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = str(ROOT / "logs")
    REPORT_DIR: str = str(ROOT / "reports")

    class Config:
        env_file = str(ROOT / ".env")
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """설정 싱글턴. 테스트 시 get_settings.cache_clear() 호출."""
    return Settings()
