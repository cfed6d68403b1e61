"""
pipelines/train_pipeline.py
================================
전체 파이프라인 -- CSV 적재부터 평가 리포트까지 한 번에 실행.

[패턴] Template Method -- 파이프라인의 골격을 정의
[역할] 적재 -> 인코딩 -> 분할 -> 학습 -> 배치 추론 -> 평가 -> 저장

데이터 흐름:
  CSV -> RawRecord -> FeatureRecord -> {train, test}
  -> 모델 어댑터 학습 -> test 예측 -> 예측 분포 + 혼동행렬

실행: python scripts/run_pipeline.py --data data/01_raw/telco_churn.csv
"""

import threading
import uuid
from dataclasses import dataclass, field
from typing import Optional

from config.settings import Settings, get_settings
from pipelines.data_pipeline import DataPipeline, DataPipelineResult
from pipelines.inference_pipeline import InferencePipeline, PredictionBatch
from src.evaluation.metrics import EvaluationReport, Evaluator
from src.evaluation.reporter import EvaluationReporter
from src.features.splitter import Dataset, DatasetSplitter
from src.features.store import FeatureStore
from src.models.base import ModelAdapter, ModelHandle
from src.utils.exceptions import RecordError
from src.utils.logger import get_logger, set_run_id
from src.utils.timer import timed, timer

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """파이프라인 실행 결과. 성공 산출물과 레코드 에러를 함께 담습니다."""
    run_id: str
    data: DataPipelineResult
    train: Dataset
    test: Dataset
    handle: ModelHandle
    batch: PredictionBatch
    report: EvaluationReport
    report_dict: dict = field(default_factory=dict)

    @property
    def errors(self) -> list[RecordError]:
        return self.data.errors + self.batch.errors


class TrainPipeline:
    """
    학습 + 평가 파이프라인.

    사용법:
        pipeline = TrainPipeline(adapter=XGBoostAdapter())
        result = pipeline.run("data/01_raw/telco_churn.csv")
        result.report.confusion
    """

    def __init__(
            self,
            adapter: ModelAdapter,
            settings: Settings = None,
            persist: bool = False,
            save_artifacts: bool = True,
    ):
        self._adapter = adapter
        self._settings = settings or get_settings()
        self._persist = persist
        self._save_artifacts = save_artifacts

        s = self._settings
        self._data_pipeline = DataPipeline(settings=s, persist=persist)
        self._splitter = DatasetSplitter(
            train_fraction=s.TRAIN_FRACTION, seed=s.SPLIT_SEED, exact=s.EXACT_SPLIT,
        )
        self._inference = InferencePipeline(
            adapter,
            max_workers=s.PREDICT_MAX_WORKERS,
            timeout_seconds=s.PREDICT_TIMEOUT_SECONDS,
        )
        self._evaluator = Evaluator(n_workers=s.EVAL_WORKERS)
        self._reporter = EvaluationReporter()
        self._store = FeatureStore(base_dir=s.DATA_MODEL_INPUT)

    @timer("전체 파이프라인")
    def run(self, csv_path: str, cancel_event: Optional[threading.Event] = None) -> PipelineResult:
        """
        전체 파이프라인 실행.

        단계:
        1. CSV 적재 + 피처 인코딩
        2. Train/Test 분할 (근사 또는 정확)
        3. 모델 학습
        4. 테스트셋 배치 추론
        5. 평가 (분포 + 혼동행렬 + 메트릭)
        6. 리포트 / 모델 / 분할 스냅샷 저장 (+ DB 기록)
        """
        run_id = str(uuid.uuid4())
        s = self._settings
        timings: dict[str, float] = {}

        # ── 1. 적재 + 인코딩 ──
        with timed("적재/인코딩", timings):
            data = self._data_pipeline.run(csv_path)
        set_run_id(run_id)
        logger.info("실행 ID: %s / 파이프라인 ID: %s", run_id[:8], data.pipeline_run_id[:8])

        # ── 2. 분할 ──
        with timed("분할", timings):
            train, test = self._splitter.split(data.dataset)
        if not s.EXACT_SPLIT:
            logger.info("근사 분할입니다: train 비율은 정확히 %.0f%% 가 아닐 수 있습니다", s.TRAIN_FRACTION * 100)

        if self._persist:
            self._record_start(run_id, data.pipeline_run_id, train, test)

        try:
            # ── 3. 학습 ──
            logger.info("━━━ 모델 학습: %s ━━━", self._adapter.name)
            self._update_status(run_id, "training")
            with timed("학습", timings):
                handle = self._adapter.train(train)

            # ── 4. 배치 추론 ──
            self._update_status(run_id, "predicting")
            with timed("배치 추론", timings):
                batch = self._inference.predict_batch(handle, test, cancel_event=cancel_event)

            # ── 5. 평가 ──
            self._update_status(run_id, "evaluating")
            with timed("평가", timings):
                report = self._evaluator.evaluate(batch.predictions)
        except Exception as e:
            self._update_status(run_id, "failed", error_message=f"{type(e).__name__}: {e}")
            raise

        model_info = {**self._adapter.get_info(), **handle.get_info()}
        report_dict = self._reporter.generate(
            report, model_info, errors=data.errors + batch.errors,
            save_path=f"{s.REPORT_DIR}/eval_report.json" if self._save_artifacts else None,
            extra={"run_id": run_id, "skipped": len(batch.skipped), "timings": timings},
        )

        # ── 6. 저장 ──
        model_path = None
        if self._save_artifacts:
            self._reporter.save_confusion(report, f"{s.REPORT_DIR}/confusion_matrix.csv")
            self._store.save_splits(train, test)
            model_path = f"{s.MODEL_REGISTRY}/churn_{handle.model_type}"
            try:
                self._adapter.save(handle, model_path)
            except NotImplementedError:
                logger.warning("%s 은 모델 저장을 지원하지 않습니다", self._adapter.name)
                model_path = None

        if self._persist:
            from src.database.repository import PredictionRepository
            PredictionRepository().save_predictions(batch.predictions, run_id)
            self._update_status(
                run_id, "completed",
                metrics=report.metrics, report=report_dict, model_path=model_path,
            )

        logger.info("파이프라인 완료 (run=%s): %s", run_id[:8], report_dict["summary"])
        return PipelineResult(
            run_id=run_id, data=data, train=train, test=test, handle=handle,
            batch=batch, report=report, report_dict=report_dict,
        )

    def _record_start(self, run_id: str, pipeline_run_id: str, train: Dataset, test: Dataset) -> None:
        from src.database.repository import TrainingRunRepository
        TrainingRunRepository().create_run(
            run_id=run_id,
            model_type=self._adapter.name,
            pipeline_run_id=pipeline_run_id,
            train_size=len(train),
            test_size=len(test),
            train_fraction=self._settings.TRAIN_FRACTION,
            split_seed=self._settings.SPLIT_SEED,
            hyperparameters=self._adapter.get_info().get("params"),
        )

    def _update_status(self, run_id: str, status: str, **kwargs) -> None:
        if not self._persist:
            return
        from src.database.repository import TrainingRunRepository
        TrainingRunRepository().update_status(run_id, status, **kwargs)
