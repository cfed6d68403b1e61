"""
📁 scripts/run_pipeline.py
===========================
전체 파이프라인 실행 스크립트 (적재 → 인코딩 → 분할 → 학습 → 예측 → 평가).

실행: python scripts/run_pipeline.py                     # data/01_raw/telco_churn.csv
      python scripts/run_pipeline.py --data ... --seed 42 --exact-split
      python scripts/run_pipeline.py --data ... --persist     # DB 에도 기록
"""

import sys
import argparse
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import get_settings
from src.utils.logger import setup_logging, get_logger
from src.models.xgboost_model import XGBoostAdapter
from pipelines.train_pipeline import TrainPipeline

logger = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(description="이탈 예측 파이프라인")
    parser.add_argument("--data", type=str, default=None, help="원본 CSV 경로 (기본: DATA_RAW/telco_churn.csv)")
    parser.add_argument("--train-fraction", type=float, default=None, help="train 비율 (기본: 설정값 0.8)")
    parser.add_argument("--seed", type=int, default=None, help="분할 시드 (미지정 시 재현 불가)")
    parser.add_argument("--exact-split", action="store_true", help="정확한 개수로 분할")
    parser.add_argument("--workers", type=int, default=None, help="예측 동시 호출 수")
    parser.add_argument("--timeout", type=float, default=None, help="예측 호출 타임아웃 (초)")
    parser.add_argument("--persist", action="store_true", help="결과를 DB에 기록")
    args = parser.parse_args()

    setup_logging()

    # 명령행 값으로 설정 덮어쓰기 (지정한 것만)
    overrides = {
        "TRAIN_FRACTION": args.train_fraction,
        "SPLIT_SEED": args.seed,
        "EXACT_SPLIT": args.exact_split or None,
        "PREDICT_MAX_WORKERS": args.workers,
        "PREDICT_TIMEOUT_SECONDS": args.timeout,
    }
    settings = get_settings().model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    csv_path = args.data or f"{settings.DATA_RAW}/telco_churn.csv"
    pipeline = TrainPipeline(adapter=XGBoostAdapter(), settings=settings, persist=args.persist)
    result = pipeline.run(csv_path)

    logger.info("예측 분포: %s", result.report.distribution)
    logger.info("혼동행렬: %s", result.report.confusion)
    logger.info("레코드 에러: %d건", len(result.errors))


if __name__ == "__main__":
    main()
