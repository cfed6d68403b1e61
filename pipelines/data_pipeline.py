"""
pipelines/data_pipeline.py
===============================
CSV 적재 -> 피처 인코딩 파이프라인.

[패턴] Template Method -- 단계별 골격을 정의하고 각 단계는 교체 가능
[역할] 원본 CSV -> RawRecord -> FeatureRecord 까지의 전체 흐름

데이터 흐름:
  적재   -> raw_customers 테이블 (persist=True 일 때)
  인코딩 -> churn_features 테이블 (persist=True 일 때)
"""

import uuid
from dataclasses import dataclass, field

from config.settings import Settings, get_settings
from src.features.builder import EncodeResult, FeatureBuilder
from src.features.splitter import Dataset
from src.preprocessing.loader import LoadResult, load_raw_records
from src.utils.exceptions import RecordError
from src.utils.logger import get_logger, set_run_id
from src.utils.timer import timer

logger = get_logger(__name__)


@dataclass
class DataPipelineResult:
    pipeline_run_id: str
    load: LoadResult
    encode: EncodeResult
    dataset: Dataset = field(init=False)

    def __post_init__(self):
        self.dataset = Dataset("features", self.encode.features)

    @property
    def errors(self) -> list[RecordError]:
        return self.load.errors + self.encode.errors


class DataPipeline:
    """
    CSV 적재 -> 피처 인코딩 파이프라인.

    사용법:
        pipeline = DataPipeline()
        result = pipeline.run("data/01_raw/telco_churn.csv")
        result.dataset          # 분할 전 전체 피처 데이터셋
        result.errors           # 적재 + 인코딩 에러
    """

    def __init__(self, settings: Settings = None, persist: bool = False):
        self._settings = settings or get_settings()
        self._builder = FeatureBuilder(n_workers=self._settings.ENCODE_WORKERS)
        self._persist = persist

    @timer("데이터 파이프라인")
    def run(self, csv_path: str) -> DataPipelineResult:
        """
        단계:
        1. 적재 (loader)   -> raw_customers 테이블
        2. 인코딩 (builder) -> churn_features 테이블
        """
        pipeline_run_id = str(uuid.uuid4())
        set_run_id(pipeline_run_id)
        logger.info("파이프라인 실행 ID: %s", pipeline_run_id[:8])

        # Step 1: 적재
        logger.info("━━━ Step 1: CSV 적재 ━━━")
        loaded = load_raw_records(csv_path)

        # Step 2: 인코딩
        logger.info("━━━ Step 2: 피처 인코딩 ━━━")
        encoded = self._builder.build(loaded.records)

        if self._persist:
            self._save(loaded, encoded, pipeline_run_id)

        result = DataPipelineResult(pipeline_run_id, loaded, encoded)
        logger.info(
            "데이터 파이프라인 완료: 적재 %d건 → 피처 %d건 (필터 %d건, 에러 %d건)",
            loaded.n_loaded, len(result.dataset), encoded.n_filtered, len(result.errors),
        )
        return result

    def _save(self, loaded: LoadResult, encoded: EncodeResult, pipeline_run_id: str) -> None:
        from src.database.connection import init_db
        from src.database.repository import FeatureRepository, RawCustomerRepository

        init_db()
        RawCustomerRepository().save_records(loaded.records, pipeline_run_id)
        FeatureRepository().save_features(encoded.features, pipeline_run_id)
