"""
tests/unit/test_database.py
==============================
DB Repository 단위 테스트.

SQLite 인메모리 DB로 빠르게 검증합니다.
"""

import uuid

import pandas as pd
import pytest

from src.evaluation.metrics import Prediction
from src.features.builder import FeatureBuilder


class TestRawCustomerRepository:
    """RawCustomerRepository 테스트"""

    def test_save_and_load(self, mock_get_session, raw_records):
        """저장 후 로드하면 동일한 행 수와 NULL 이 보존되어야 한다"""
        from src.database.repository import RawCustomerRepository
        repo = RawCustomerRepository()

        pipeline_run_id = str(uuid.uuid4())
        saved = repo.save_records(raw_records, pipeline_run_id)
        assert saved == len(raw_records)

        df = repo.to_dataframe(pipeline_run_id)
        assert len(df) == len(raw_records)
        assert "total_charges" in df.columns
        row = df.set_index("customer_id").loc["0004-D"]
        assert pd.isna(row["total_charges"])

    def test_get_latest_run_id(self, mock_get_session, raw_records):
        from src.database.repository import RawCustomerRepository
        repo = RawCustomerRepository()

        repo.save_records(raw_records, str(uuid.uuid4()))
        repo.save_records(raw_records, str(uuid.uuid4()))

        assert repo.get_latest_run_id() is not None

    def test_empty_table(self, mock_get_session):
        """빈 테이블 조회 시 빈 DataFrame 반환"""
        from src.database.repository import RawCustomerRepository
        df = RawCustomerRepository().to_dataframe()
        assert df.empty


class TestFeatureRepository:
    """FeatureRepository 테스트"""

    def test_save_and_load_dataset(self, mock_get_session, raw_records):
        """피처 저장 → Dataset 복원"""
        from src.database.repository import FeatureRepository
        repo = FeatureRepository()
        features = FeatureBuilder().build(raw_records).features

        pipeline_run_id = str(uuid.uuid4())
        assert repo.save_features(features, pipeline_run_id) == len(features)

        dataset = repo.load_dataset(pipeline_run_id)
        assert dataset.ids == [f.customer_id for f in features]
        assert dataset.labels() == {f.customer_id: f.churn_label for f in features}

    def test_runs_are_separated(self, mock_get_session, raw_records):
        from src.database.repository import FeatureRepository
        repo = FeatureRepository()
        features = FeatureBuilder().build(raw_records).features

        run_a, run_b = str(uuid.uuid4()), str(uuid.uuid4())
        repo.save_features(features[:1], run_a)
        repo.save_features(features, run_b)

        assert len(repo.to_dataframe(run_a)) == 1
        assert len(repo.to_dataframe(run_b)) == len(features)


class TestPredictionRepository:

    def test_save_predictions_with_null_confidence(self, mock_get_session):
        from src.database.repository import PredictionRepository
        repo = PredictionRepository()
        predictions = [
            Prediction("C1", 1, 1, 0.9, {0: 0.1, 1: 0.9}),
            Prediction("C2", 0, 1, None, {0: 0.4}),
        ]

        run_id = str(uuid.uuid4())
        assert repo.save_predictions(predictions, run_id) == 2

        df = repo.to_dataframe(run_id).set_index("customer_id")
        assert df.loc["C1", "predicted"] == "1"
        assert df.loc["C1", "confidence"] == pytest.approx(0.9)
        assert pd.isna(df.loc["C2", "confidence"])


class TestTrainingRunRepository:
    """TrainingRunRepository 테스트"""

    def test_create_and_get_run(self, mock_get_session):
        from src.database.repository import TrainingRunRepository
        repo = TrainingRunRepository()

        run_id = str(uuid.uuid4())
        run = repo.create_run(
            run_id=run_id, model_type="XGBoostAdapter",
            train_size=80, test_size=20, train_fraction=0.8, split_seed=42,
            hyperparameters={"max_depth": 5},
        )

        assert run.run_id == run_id
        assert run.status == "started"

        fetched = repo.get_run(run_id)
        assert fetched is not None
        assert fetched.split_seed == 42
        assert fetched.hyperparameters == {"max_depth": 5}

    def test_status_transitions(self, mock_get_session):
        """started → training → completed"""
        from src.database.repository import TrainingRunRepository
        repo = TrainingRunRepository()

        run_id = str(uuid.uuid4())
        repo.create_run(run_id=run_id, model_type="XGBoostAdapter")
        repo.update_status(run_id, "training")
        assert repo.get_run(run_id).status == "training"

        repo.update_status(run_id, "completed", metrics={"accuracy": 0.8}, model_path="models/m")
        run = repo.get_run(run_id)
        assert run.status == "completed"
        assert run.metrics == {"accuracy": 0.8}
        assert run.completed_at is not None

    def test_failed_run_records_message(self, mock_get_session):
        from src.database.repository import TrainingRunRepository
        repo = TrainingRunRepository()

        run_id = str(uuid.uuid4())
        repo.create_run(run_id=run_id, model_type="XGBoostAdapter")
        repo.update_status(run_id, "failed", error_message="boom")

        run = repo.get_run(run_id)
        assert run.status == "failed"
        assert run.error_message == "boom"

    def test_get_latest_completed(self, mock_get_session):
        from src.database.repository import TrainingRunRepository
        repo = TrainingRunRepository()

        done_id = str(uuid.uuid4())
        repo.create_run(run_id=done_id, model_type="XGBoostAdapter")
        repo.update_status(done_id, "completed")
        repo.create_run(run_id=str(uuid.uuid4()), model_type="XGBoostAdapter")

        latest = repo.get_latest_run()
        assert latest.run_id == done_id

    def test_get_nonexistent_run(self, mock_get_session):
        from src.database.repository import TrainingRunRepository
        assert TrainingRunRepository().get_run("no-such-run") is None


def test_init_db_creates_tables(mock_get_session, db_engine):
    """init_db 는 패치된 엔진에 테이블을 만든다"""
    from sqlalchemy import inspect
    from src.database.connection import init_db

    init_db()
    tables = set(inspect(db_engine).get_table_names())
    assert {"raw_customers", "churn_features", "churn_predictions", "training_runs"} <= tables
