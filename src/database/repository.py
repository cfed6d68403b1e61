"""
📁 src/database/repository.py
================================
데이터 저장소 (Repository 패턴).

[역할] 각 파이프라인 단계의 결과를 테이블에 기록하고 다시 읽어옵니다.
[패턴] Repository — DB 접근을 하나의 클래스로 추상화

저장소 목록:
    RawCustomerRepository   - raw_customers     (CSV 적재 결과)
    FeatureRepository       - churn_features    (인코딩 결과)
    PredictionRepository    - churn_predictions (예측 + 신뢰도)
    TrainingRunRepository   - training_runs     (실행 이력 / 상태 전이)

모든 쓰기는 session_scope() 한 트랜잭션 안에서 일어납니다.
실패하면 롤백 후 예외를 그대로 올립니다 (부분 저장 없음).
"""

from datetime import datetime
from typing import Any, Optional, Sequence

import pandas as pd
from sqlalchemy import desc

from src.database.connection import session_scope
from src.database.models import ChurnFeature, ChurnPrediction, RawCustomer, TrainingRun
from src.evaluation.metrics import Prediction
from src.features.builder import FeatureBuilder, FeatureRecord
from src.features.splitter import Dataset
from src.preprocessing.schemas import RawRecord
from src.utils.logger import get_logger

logger = get_logger(__name__)

BATCH_SIZE = 1000
TERMINAL_STATUSES = ("completed", "failed")


def _bulk_insert(model, rows: list[dict[str, Any]], run_id: str) -> int:
    """rows 를 BATCH_SIZE 단위로 나눠 한 트랜잭션에 넣습니다."""
    table = model.__tablename__
    try:
        with session_scope() as session:
            for start in range(0, len(rows), BATCH_SIZE):
                session.bulk_insert_mappings(model, rows[start:start + BATCH_SIZE])
    except Exception as e:
        logger.error("%s 저장 실패 (run=%s): %s", table, run_id[:8], e)
        raise

    logger.info("%s 저장 완료: %d건 (run=%s)", table, len(rows), run_id[:8])
    return len(rows)


def _read_frame(model, run_column, run_id: Optional[str], drop_cols: Sequence[str]) -> pd.DataFrame:
    """run_id 로 걸러 DataFrame 으로 읽습니다 (run_id 가 None 이면 전체)."""
    with session_scope() as session:
        query = session.query(model)
        if run_id:
            query = query.filter(run_column == run_id)
        df = pd.read_sql(query.statement, session.bind)
    return df.drop(columns=[c for c in drop_cols if c in df.columns])


def _latest_run_id(run_column, time_column) -> Optional[str]:
    with session_scope() as session:
        row = session.query(run_column).order_by(desc(time_column)).first()
    return row[0] if row else None


def _detached(session, obj):
    """세션이 닫힌 뒤에도 속성을 읽을 수 있게 분리"""
    if obj is not None:
        session.expunge(obj)
    return obj


# ================================================================
# RawCustomerRepository — raw_customers
# ================================================================

class RawCustomerRepository:
    """고객 원본 저장소"""

    def save_records(self, records: Sequence[RawRecord], pipeline_run_id: str) -> int:
        rows = [{**r.model_dump(), "pipeline_run_id": pipeline_run_id} for r in records]
        return _bulk_insert(RawCustomer, rows, pipeline_run_id)

    def to_dataframe(self, pipeline_run_id: str = None) -> pd.DataFrame:
        """
        raw_customers → DataFrame.

        Args:
            pipeline_run_id: 특정 실행 ID (None이면 최신)
        """
        run_id = pipeline_run_id or self.get_latest_run_id()
        df = _read_frame(RawCustomer, RawCustomer.pipeline_run_id, run_id, ("id", "loaded_at"))
        logger.info("raw_customers → DataFrame: %d행 × %d열", *df.shape)
        return df

    def get_latest_run_id(self) -> Optional[str]:
        return _latest_run_id(RawCustomer.pipeline_run_id, RawCustomer.loaded_at)


# ================================================================
# FeatureRepository — churn_features
# ================================================================

class FeatureRepository:
    """피처 저장소"""

    def save_features(self, features: Sequence[FeatureRecord], pipeline_run_id: str) -> int:
        df = FeatureBuilder.to_frame(features)
        df["pipeline_run_id"] = pipeline_run_id
        return _bulk_insert(ChurnFeature, df.to_dict("records"), pipeline_run_id)

    def to_dataframe(self, pipeline_run_id: str = None) -> pd.DataFrame:
        run_id = pipeline_run_id or self.get_latest_run_id()
        df = _read_frame(
            ChurnFeature, ChurnFeature.pipeline_run_id, run_id,
            ("id", "created_at", "pipeline_run_id"),
        )
        logger.info("churn_features → DataFrame: %d행 × %d열", *df.shape)
        return df

    def load_dataset(self, pipeline_run_id: str = None, name: str = "features") -> Dataset:
        """churn_features → Dataset (피처 테이블에서 바로 분할할 때)"""
        return Dataset(name, FeatureBuilder.from_frame(self.to_dataframe(pipeline_run_id)))

    def get_latest_run_id(self) -> Optional[str]:
        return _latest_run_id(ChurnFeature.pipeline_run_id, ChurnFeature.created_at)


# ================================================================
# PredictionRepository — churn_predictions
# ================================================================

class PredictionRepository:
    """예측 결과 저장소. 클래스 라벨은 문자열로, 확률 맵은 JSON 으로 저장합니다."""

    def save_predictions(self, predictions: Sequence[Prediction], run_id: str) -> int:
        rows = [
            {
                "run_id": run_id,
                "customer_id": p.customer_id,
                "actual": str(p.actual),
                "predicted": str(p.predicted),
                "confidence": p.confidence,
                "probabilities": {str(k): v for k, v in p.probabilities.items()},
            }
            for p in predictions
        ]
        return _bulk_insert(ChurnPrediction, rows, run_id)

    def to_dataframe(self, run_id: str) -> pd.DataFrame:
        df = _read_frame(ChurnPrediction, ChurnPrediction.run_id, run_id, ("id", "created_at"))
        logger.info("churn_predictions → DataFrame: %d행", len(df))
        return df


# ================================================================
# TrainingRunRepository — 실행 이력
# ================================================================

class TrainingRunRepository:
    """
    파이프라인 실행 이력 저장소.

    상태 전이: started → training → predicting → evaluating → completed
                                  (어느 단계에서든)        → failed
    """

    def create_run(
        self,
        run_id: str,
        model_type: str,
        pipeline_run_id: str = None,
        train_size: int = None,
        test_size: int = None,
        train_fraction: float = None,
        split_seed: int = None,
        hyperparameters: dict = None,
    ) -> TrainingRun:
        """실행 기록 생성. 세션에서 분리된 TrainingRun 반환."""
        with session_scope() as session:
            run = TrainingRun(
                run_id=run_id,
                pipeline_run_id=pipeline_run_id,
                model_type=model_type,
                train_size=train_size,
                test_size=test_size,
                train_fraction=train_fraction,
                split_seed=split_seed,
                hyperparameters=hyperparameters,
                status="started",
            )
            session.add(run)
            session.flush()
            session.refresh(run)
            _detached(session, run)

        logger.info("실행 기록 생성: %s (%s)", run_id[:8], model_type)
        return run

    def update_status(
        self,
        run_id: str,
        status: str,
        metrics: dict = None,
        report: dict = None,
        model_path: str = None,
        error_message: str = None,
    ) -> bool:
        """
        실행 상태 변경. 넘긴 값만 덮어씁니다.

        Returns:
            기록이 있어 갱신했으면 True
        """
        updates = {
            "metrics": metrics, "report": report,
            "model_path": model_path, "error_message": error_message,
        }
        with session_scope() as session:
            run = session.query(TrainingRun).filter(TrainingRun.run_id == run_id).first()
            if run is None:
                logger.error("실행 기록 없음: %s", run_id)
                return False

            run.status = status
            for key, value in updates.items():
                if value is not None:
                    setattr(run, key, value)
            if status in TERMINAL_STATUSES:
                run.completed_at = datetime.utcnow()

        logger.info("실행 기록 업데이트: %s → %s", run_id[:8], status)
        return True

    def get_run(self, run_id: str) -> Optional[TrainingRun]:
        with session_scope() as session:
            run = session.query(TrainingRun).filter(TrainingRun.run_id == run_id).first()
            return _detached(session, run)

    def get_latest_run(self, model_type: str = None) -> Optional[TrainingRun]:
        """최신 완료 실행"""
        with session_scope() as session:
            query = session.query(TrainingRun).filter(TrainingRun.status == "completed")
            if model_type:
                query = query.filter(TrainingRun.model_type == model_type)
            return _detached(session, query.order_by(desc(TrainingRun.completed_at)).first())
