"""
📁 src/evaluation/reporter.py
===============================
평가 리포트 생성.

[패턴] Template Method — 리포트 형식을 정의하고 내용만 교체
[역할] EvaluationReport → 사람이 읽기 쉬운 JSON 리포트 + 혼동행렬 표(CSV)
"""

from datetime import datetime
from typing import Optional

import pandas as pd

from src.evaluation.metrics import EvaluationReport, report_to_dict
from src.utils.exceptions import RecordError
from src.utils.logger import get_logger
from src.utils import io

logger = get_logger(__name__)


class EvaluationReporter:
    """
    평가 리포트 생성기.

    사용법:
        reporter = EvaluationReporter()
        reporter.generate(report, model_info, save_path="reports/eval_report.json")
        reporter.save_confusion(report, "reports/confusion_matrix.csv")
    """

    def generate(
            self,
            report: EvaluationReport,
            model_info: dict,
            errors: Optional[list[RecordError]] = None,
            save_path: str = None,
            extra: Optional[dict] = None,
    ) -> dict:
        """
        평가 리포트를 생성하고 선택적으로 파일로 저장합니다.

        Args:
            errors: 레코드 에러 (error_type 별 개수만 리포트에 남김)
            extra: 실행 ID, 단계별 소요 시간 등 덧붙일 필드

        Returns:
            리포트 딕셔너리
        """
        errors = errors or []
        error_counts: dict[str, int] = {}
        for e in errors:
            error_counts[e.error_type] = error_counts.get(e.error_type, 0) + 1

        result = {
            "timestamp": datetime.now().isoformat(),
            "model": model_info,
            **report_to_dict(report),
            "errors": error_counts,
            **(extra or {}),
            "summary": self._summarize(report),
        }

        if save_path:
            io.save_json(result, save_path)
            logger.info("리포트 저장: %s", save_path)

        return result

    @staticmethod
    def confusion_frame(report: EvaluationReport) -> pd.DataFrame:
        """혼동행렬 표: 행 = 실제, 열 = 예측, 값 = 개수 (없는 칸은 0)"""
        labels = report.labels
        frame = pd.DataFrame(0, index=labels, columns=labels, dtype=int)
        for (actual, predicted), n in report.confusion.items():
            frame.loc[actual, predicted] = n
        frame.index.name = "actual"
        frame.columns.name = "predicted"
        return frame

    def save_confusion(self, report: EvaluationReport, path: str) -> None:
        frame = self.confusion_frame(report)
        io.save_csv(frame.reset_index(), path)

    def _summarize(self, report: EvaluationReport) -> str:
        """한 줄 요약"""
        m = report.metrics
        # 한 클래스뿐이거나 양성 확률이 없으면 AUC 는 계산되지 않음
        auc = f"{m['roc_auc']:.3f}" if "roc_auc" in m else "n/a"
        return (
            f"예측 {report.n_predictions}건, 정확도={m.get('accuracy', 0):.1%}, "
            f"F1={m.get('f1', 0):.3f}, AUC={auc}"
        )
