"""
pipelines/inference_pipeline.py
====================================
배치 추론 파이프라인.

[패턴] Chain of Responsibility — 레코드 → 모델 호출 → 신뢰도 추출 → Prediction
[역할] 테스트 데이터셋 전체를 모델 어댑터로 예측합니다.

동시성 규칙:
  - 스레드 풀로 최대 max_workers 건만 동시에 호출합니다.
  - 타임아웃은 호출이 "시작된" 시점부터 잽니다 (큐 대기 시간은 제외).
    초과하면 해당 레코드만 PredictionError, 배치는 계속 진행합니다.
    타임아웃된 호출은 버려지지만 끝날 때까지 max_workers 자리를 차지합니다.
    모든 자리가 버린 호출에 묶이면 대기 중인 레코드도 타임아웃만큼 기다린 뒤
    PredictionError 로 처리합니다. 풀 종료 시 버린 호출은 기다리지 않습니다.
  - cancel_event 가 설정되면 새 호출을 더 내보내지 않고,
    남은 레코드는 skipped 로 보고합니다. 이미 나간 호출은 마저 수거합니다.
  - MissingProbabilityError 는 신뢰도만 None 으로 두고 예측은 유지합니다.
"""

import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Optional

from src.evaluation.metrics import Evaluator, Prediction
from src.features.builder import FeatureRecord
from src.features.splitter import Dataset
from src.models.base import ModelAdapter, ModelHandle
from src.utils.exceptions import MissingProbabilityError, PredictionError, RecordError
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PredictionBatch:
    """배치 추론 결과: 성공 예측 + 에러 + 건너뛴 레코드"""
    predictions: list[Prediction] = field(default_factory=list)
    errors: list[RecordError] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class InferencePipeline:
    """
    배치 추론 파이프라인.

    사용법:
        pipeline = InferencePipeline(XGBoostAdapter(), max_workers=4, timeout_seconds=30)
        batch = pipeline.predict_batch(handle, test_dataset)

        # 중간 취소
        cancel = threading.Event()
        batch = pipeline.predict_batch(handle, test_dataset, cancel_event=cancel)
    """

    def __init__(
            self,
            adapter: ModelAdapter,
            max_workers: int = 4,
            timeout_seconds: Optional[float] = 30.0,
            poll_interval: float = 0.05,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers 는 1 이상이어야 합니다: {max_workers}")
        self._adapter = adapter
        self._max_workers = max_workers
        self._timeout = timeout_seconds
        self._poll = poll_interval if timeout_seconds is None else min(poll_interval, timeout_seconds)

    def predict_batch(
            self,
            handle: ModelHandle,
            dataset: Dataset,
            cancel_event: Optional[threading.Event] = None,
    ) -> PredictionBatch:
        """
        데이터셋 전체 예측.

        Returns:
            PredictionBatch — predictions 는 데이터셋 순서를 따릅니다.
        """
        records = list(dataset)
        logger.info(
            "배치 추론: %d건 (workers=%d, timeout=%s초)",
            len(records), self._max_workers, self._timeout,
        )

        batch = PredictionBatch()
        done_by_id: dict[str, Prediction] = {}
        started: dict[str, float] = {}
        started_lock = threading.Lock()
        in_flight: dict[Future, FeatureRecord] = {}
        # 타임아웃으로 버린 호출도 끝날 때까지 자리를 차지함
        slots = threading.BoundedSemaphore(self._max_workers)
        next_idx = 0
        timed_out = 0
        starved_since: Optional[float] = None

        pool = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="predict")
        try:
            while True:
                cancelled = cancel_event is not None and cancel_event.is_set()

                # 1) 빈 자리만큼 새 호출 발행 (취소되면 중단)
                while not cancelled and next_idx < len(records) and slots.acquire(blocking=False):
                    record = records[next_idx]
                    next_idx += 1
                    future = pool.submit(self._call, handle, record, started, started_lock, slots)
                    in_flight[future] = record
                    starved_since = None

                if not in_flight:
                    if cancelled or next_idx >= len(records):
                        break
                    # 모든 워커가 버린 호출에 묶여 있음: 대기 중인 맨 앞 레코드도 타임아웃 적용
                    now = time.monotonic()
                    if starved_since is None:
                        starved_since = now
                    elif self._timeout is not None and now - starved_since > self._timeout:
                        record = records[next_idx]
                        next_idx += 1
                        timed_out += 1
                        self._fail_timeout(record, batch.errors, "빈 워커 없음")
                        starved_since = now
                    time.sleep(self._poll)
                    continue

                # 2) 완료된 호출 수거
                done, _ = wait(in_flight, timeout=self._poll, return_when=FIRST_COMPLETED)
                for future in done:
                    record = in_flight.pop(future)
                    self._collect(future, record, done_by_id, batch.errors)

                # 3) 타임아웃 초과 호출 포기
                if self._timeout is not None:
                    now = time.monotonic()
                    with started_lock:
                        expired = [
                            f for f, r in in_flight.items()
                            if r.customer_id in started and now - started[r.customer_id] > self._timeout
                        ]
                    for future in expired:
                        timed_out += 1
                        self._fail_timeout(in_flight.pop(future), batch.errors)
        finally:
            # 타임아웃으로 버린 호출은 기다리지 않음
            pool.shutdown(wait=False, cancel_futures=True)

        batch.skipped = [r.customer_id for r in records[next_idx:]]
        batch.predictions = [done_by_id[r.customer_id] for r in records if r.customer_id in done_by_id]

        if batch.skipped:
            logger.warning("취소로 건너뛴 레코드: %d건", len(batch.skipped))
        logger.info(
            "배치 추론 완료: 성공 %d건, 에러 %d건 (타임아웃 %d건), 건너뜀 %d건",
            len(batch.predictions), len(batch.errors), timed_out, len(batch.skipped),
        )
        return batch

    def _call(self, handle, record, started, started_lock, slots):
        """워커 스레드: 시작 시각 기록 후 어댑터 호출. 끝나면 자리 반납."""
        try:
            with started_lock:
                started[record.customer_id] = time.monotonic()
            return self._adapter.predict(handle, record)
        finally:
            slots.release()

    def _fail_timeout(self, record: FeatureRecord, errors: list[RecordError], reason: str = None) -> None:
        detail = f"{self._timeout}초 초과" + (f", {reason}" if reason else "")
        err = PredictionError(f"모델 호출 타임아웃 ({detail})", customer_id=record.customer_id)
        logger.warning("예측 실패 (%s): %s", record.customer_id, err.message)
        errors.append(err.to_record())

    def _collect(
            self,
            future: Future,
            record: FeatureRecord,
            done_by_id: dict[str, Prediction],
            errors: list[RecordError],
    ) -> None:
        """완료된 호출 1건 → Prediction 또는 에러"""
        cid = record.customer_id
        try:
            output = future.result()
        except Exception as e:
            # 외부 모델은 어떤 예외든 낼 수 있음 → 해당 레코드만 실패 처리
            err = e if isinstance(e, PredictionError) else PredictionError(
                f"모델 호출 실패: {type(e).__name__}: {e}", customer_id=cid,
            )
            err.customer_id = err.customer_id or cid
            logger.warning("예측 실패 (%s): %s", cid, err.message)
            errors.append(err.to_record())
            return

        try:
            confidence = Evaluator.confidence_score(output.predicted_class, output.probabilities, cid)
        except MissingProbabilityError as e:
            logger.warning("신뢰도 계산 불가 (%s): %s", cid, e.message)
            errors.append(e.to_record())
            confidence = None

        done_by_id[cid] = Prediction(
            customer_id=cid,
            actual=record.churn_label,
            predicted=output.predicted_class,
            confidence=confidence,
            probabilities=dict(output.probabilities),
        )
