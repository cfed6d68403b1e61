"""
📁 scripts/run_evaluate.py
============================
저장된 모델을 로드하여 저장된 테스트 데이터셋으로 다시 평가합니다.

실행:
  python scripts/run_evaluate.py                       # 기본 경로의 모델 + test.csv
  python scripts/run_evaluate.py --model models/registry/churn_xgboost
  python scripts/run_evaluate.py --top-features 5      # 피처 중요도 상위 5개 출력
"""

import sys
import argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import get_settings
from pipelines.inference_pipeline import InferencePipeline
from src.evaluation.metrics import Evaluator
from src.evaluation.reporter import EvaluationReporter
from src.features.store import FeatureStore
from src.models.xgboost_model import XGBoostAdapter
from src.utils.logger import setup_logging, get_logger

logger = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(description="모델 평가")
    parser.add_argument("--model", type=str, default=None, help="모델 경로 (.pkl 제외)")
    parser.add_argument("--dataset", type=str, default="test", help="평가할 데이터셋 이름")
    parser.add_argument("--top-features", type=int, default=0, help="피처 중요도 상위 N개 출력")
    args = parser.parse_args()

    setup_logging()
    s = get_settings()

    # ── 1. 테스트 데이터 로드 ──
    store = FeatureStore()
    try:
        test = store.load(args.dataset)
    except FileNotFoundError:
        logger.error("테스트 데이터 없음 (run_pipeline.py 먼저 실행하세요)")
        return

    logger.info("테스트 데이터: %d건", len(test))

    # ── 2. 모델 로드 ──
    adapter = XGBoostAdapter()
    model_path = args.model or f"{s.MODEL_REGISTRY}/churn_xgboost"
    if not Path(f"{model_path}.pkl").exists():
        logger.error("저장된 모델 없음: %s.pkl", model_path)
        return
    handle = adapter.load(model_path)

    # ── 3. 예측 + 평가 ──
    inference = InferencePipeline(
        adapter, max_workers=s.PREDICT_MAX_WORKERS, timeout_seconds=s.PREDICT_TIMEOUT_SECONDS,
    )
    batch = inference.predict_batch(handle, test)
    report = Evaluator(n_workers=s.EVAL_WORKERS).evaluate(batch.predictions)

    reporter = EvaluationReporter()
    reporter.generate(
        report, {**adapter.get_info(), **handle.get_info()}, errors=batch.errors,
        save_path=f"{s.REPORT_DIR}/eval_{args.dataset}.json",
    )
    reporter.save_confusion(report, f"{s.REPORT_DIR}/confusion_{args.dataset}.csv")
    logger.info("\n%s", reporter.confusion_frame(report).to_string())

    if args.top_features:
        for name, score in adapter.get_feature_importance(handle, top_k=args.top_features):
            logger.info("  %-20s %.4f", name, score)

    logger.info("✅ 평가 완료")


if __name__ == "__main__":
    main()
