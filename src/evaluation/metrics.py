"""
📁 src/evaluation/metrics.py
==============================
예측 평가 집계.

[역할] 예측 분포(클래스별 개수)와 혼동행렬((실제, 예측)별 개수)을 계산합니다.
       sklearn 분류 메트릭(정확도/정밀도/재현율/F1/AUC)도 함께 제공합니다.

모든 집계는 입력 배치에 대한 순수 함수입니다.
병렬 집계는 partition → reduce 방식입니다: 청크별 Counter 를 만든 뒤 덧셈으로 병합.
덧셈은 교환/결합 법칙이 성립하므로 병합 순서는 결과에 영향이 없습니다.
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Hashable, Optional, Sequence

from sklearn.metrics import (
    accuracy_score, f1_score, precision_score, recall_score, roc_auc_score,
)

from src.utils.exceptions import MissingProbabilityError
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Prediction:
    """테스트 레코드 1건의 예측 결과"""
    customer_id: str
    actual: Hashable
    predicted: Hashable
    confidence: Optional[float] = None                  # 예측 클래스의 확률 (없으면 None)
    probabilities: dict = field(default_factory=dict)   # 클래스 → 확률


@dataclass
class EvaluationReport:
    """최종 산출물: 예측 분포 + 혼동행렬"""
    distribution: dict[Hashable, int]
    confusion: dict[tuple[Hashable, Hashable], int]
    n_predictions: int
    metrics: dict[str, float] = field(default_factory=dict)

    @property
    def labels(self) -> list:
        """혼동행렬/분포에 등장하는 모든 클래스 (오름차순)"""
        seen = set(self.distribution)
        for actual, predicted in self.confusion:
            seen.update((actual, predicted))
        return sorted(seen)


class Evaluator:
    """
    예측 평가기.

    사용법:
        evaluator = Evaluator()
        evaluator.prediction_distribution(predictions)   # {1: 120, 0: 280}
        evaluator.confusion_matrix(predictions)          # {(0, 0): 250, (0, 1): 30, ...}
        report = evaluator.evaluate(predictions)
    """

    def __init__(self, n_workers: int = 1, positive_class: Hashable = 1):
        self._n_workers = max(1, n_workers)
        self._positive = positive_class

    # ================================================================
    # 단일 집계
    # ================================================================

    @staticmethod
    def prediction_distribution(predictions: Sequence[Prediction]) -> dict[Hashable, int]:
        """예측 클래스 → 개수. 합계 = 예측 성공 건수"""
        return dict(Counter(p.predicted for p in predictions))

    @staticmethod
    def confusion_matrix(predictions: Sequence[Prediction]) -> dict[tuple[Hashable, Hashable], int]:
        """(실제, 예측) → 개수. (실제, 예측) 오름차순 정렬."""
        counts = Counter((p.actual, p.predicted) for p in predictions)
        return dict(sorted(counts.items()))

    @staticmethod
    def confidence_score(
            predicted_class: Hashable,
            probabilities: dict[Hashable, float],
            customer_id: str = None,
    ) -> float:
        """
        예측 클래스의 확률을 꺼냅니다.

        Raises:
            MissingProbabilityError: 확률 맵에 예측 클래스 키가 없을 때
        """
        if predicted_class not in probabilities:
            raise MissingProbabilityError(
                f"예측 클래스 {predicted_class!r} 의 확률 없음 (keys={list(probabilities)})",
                customer_id=customer_id, predicted_class=predicted_class,
            )
        return float(probabilities[predicted_class])

    # ================================================================
    # 전체 평가
    # ================================================================

    def evaluate(self, predictions: Sequence[Prediction]) -> EvaluationReport:
        """분포 + 혼동행렬 + 분류 메트릭 → EvaluationReport"""
        predictions = list(predictions)

        if self._n_workers == 1 or len(predictions) < 2:
            distribution, confusion = _count_partition(predictions)
        else:
            size = -(-len(predictions) // self._n_workers)
            chunks = [predictions[i:i + size] for i in range(0, len(predictions), size)]
            with ThreadPoolExecutor(max_workers=self._n_workers) as pool:
                partials = list(pool.map(_count_partition, chunks))
            distribution, confusion = merge_counts(partials)

        report = EvaluationReport(
            distribution=dict(distribution),
            confusion=dict(sorted(confusion.items())),
            n_predictions=len(predictions),
            metrics=self.classification_metrics(predictions),
        )

        logger.info("━━━ 평가 결과: %d건 ━━━", report.n_predictions)
        logger.info("  예측 분포: %s", report.distribution)
        for (actual, predicted), n in report.confusion.items():
            logger.info("  actual=%-5s predicted=%-5s %d", actual, predicted, n)
        for k, v in sorted(report.metrics.items()):
            logger.info("  %-12s %.4f", k, v)
        return report

    def classification_metrics(self, predictions: Sequence[Prediction]) -> dict[str, float]:
        """
        양성 클래스 기준 분류 메트릭.

        AUC 는 두 클래스가 모두 있고 모든 예측에 양성 확률이 있을 때만 계산합니다.
        """
        if not predictions:
            return {}

        y_true = [int(p.actual == self._positive) for p in predictions]
        y_pred = [int(p.predicted == self._positive) for p in predictions]

        metrics = {
            "accuracy": float(accuracy_score(y_true, y_pred)),
            "precision": float(precision_score(y_true, y_pred, zero_division=0)),
            "recall": float(recall_score(y_true, y_pred, zero_division=0)),
            "f1": float(f1_score(y_true, y_pred, zero_division=0)),
        }

        scores = [p.probabilities.get(self._positive) for p in predictions]
        if len(set(y_true)) == 2 and all(s is not None for s in scores):
            metrics["roc_auc"] = float(roc_auc_score(y_true, scores))

        return metrics


def _count_partition(predictions: Sequence[Prediction]) -> tuple[Counter, Counter]:
    """청크 1개 집계 (각 워커가 자기 Counter 만 소유)"""
    distribution = Counter(p.predicted for p in predictions)
    confusion = Counter((p.actual, p.predicted) for p in predictions)
    return distribution, confusion


def merge_counts(partials: Sequence[tuple[Counter, Counter]]) -> tuple[Counter, Counter]:
    """청크별 (분포, 혼동행렬) Counter 를 덧셈으로 병합"""
    distribution: Counter = Counter()
    confusion: Counter = Counter()
    for dist, conf in partials:
        distribution.update(dist)
        confusion.update(conf)
    return distribution, confusion


def report_to_dict(report: EvaluationReport) -> dict[str, Any]:
    """JSON 직렬화 가능한 형태 (튜플 키 → 행 목록)"""
    return {
        "n_predictions": report.n_predictions,
        "distribution": {str(k): v for k, v in sorted(report.distribution.items())},
        "confusion_matrix": [
            {"actual": str(a), "predicted": str(p), "count": n}
            for (a, p), n in report.confusion.items()
        ],
        "metrics": report.metrics,
    }
