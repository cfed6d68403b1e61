"""
📁 src/features/builder.py
===========================
피처 빌더 — RawRecord → FeatureRecord 변환의 핵심.

[패턴] Pipeline Pattern — 필터 → 필수 필드 검사 → 인코딩 순서로 적용
[역할] 원본 레코드 1건에서 피처 레코드 1건을 만듭니다 (식별자 동일).
[위치] RawRecord → FeatureRecord 단계

핵심 원칙:
- 순수 함수: 입력 외의 상태를 읽거나 쓰지 않습니다.
- TotalCharges NULL → FilteredRecord (에러 아님, 개수만 집계)
- 필수 필드 누락 / 라벨 값 이상 / 식별자 중복 → SchemaError (해당 레코드만 제외)
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field, fields
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from config.feature_config import FEATURE_CONFIG, FeatureConfig
from src.features.encoders import BinaryLabelEncoder, EncoderFactory
from src.preprocessing.schemas import RawRecord
from src.utils.exceptions import FilteredRecord, RecordError, SchemaError
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FeatureRecord:
    """모델 입력 1건. 모든 필드가 수치형이고 NULL이 없습니다."""
    customer_id: str
    senior_citizen: int
    tenure: int
    monthly_charges: float
    total_charges: float
    gender_male: int
    has_partner: int
    has_dependents: int
    paperless_billing: int
    churn_label: int

    def features(self, names: Sequence[str]) -> list[float]:
        """지정한 순서대로 피처 값을 꺼냅니다."""
        return [float(getattr(self, n)) for n in names]


@dataclass
class EncodeResult:
    """인코딩 결과: 피처 + 필터된 레코드 + 에러"""
    features: list[FeatureRecord] = field(default_factory=list)
    filtered: list[FilteredRecord] = field(default_factory=list)
    errors: list[RecordError] = field(default_factory=list)

    @property
    def n_filtered(self) -> int:
        return len(self.filtered)


class FeatureBuilder:
    """
    피처 엔지니어링 파이프라인.

    사용법:
        builder = FeatureBuilder()
        result = builder.build(raw_records)
        result.features   # list[FeatureRecord]
        result.filtered   # TotalCharges NULL 로 제외된 레코드
        result.errors     # SchemaError 목록

        X, y = FeatureBuilder.to_matrix(result.features)
    """

    def __init__(self, config: FeatureConfig = None, n_workers: int = 1):
        self._config = config or FEATURE_CONFIG
        _check_record_fields(self._config)
        self._n_workers = max(1, n_workers)
        self._flag_encoders = {
            spec.name: (spec.source, EncoderFactory.create(spec)) for spec in self._config.flags
        }
        self._label_encoder = BinaryLabelEncoder(
            self._config.label_positive, self._config.label_values,
        )

    # ================================================================
    # 공개 API
    # ================================================================

    def build(self, records: Sequence[RawRecord]) -> EncodeResult:
        """
        RawRecord 목록 → EncodeResult.

        n_workers > 1 이면 연속 구간(chunk)으로 나눠 스레드 풀에서 인코딩하고
        입력 순서대로 이어 붙입니다. 식별자 중복 검사는 병합 후 한 번 합니다.
        """
        records = list(records)
        logger.info("인코딩 시작: %d건 (workers=%d)", len(records), self._n_workers)

        if self._n_workers == 1 or len(records) < 2:
            partials = [self._encode_chunk(records)]
        else:
            chunks = _split_chunks(records, self._n_workers)
            with ThreadPoolExecutor(max_workers=self._n_workers) as pool:
                partials = list(pool.map(self._encode_chunk, chunks))

        result = self._merge(partials)
        logger.info(
            "인코딩 완료: 피처 %d건, 필터 %d건 (%s NULL), 에러 %d건",
            len(result.features), result.n_filtered,
            self._config.filter_if_null, len(result.errors),
        )
        return result

    def encode_one(self, record: RawRecord) -> Optional[FeatureRecord]:
        """
        레코드 1건 인코딩.

        Returns:
            FeatureRecord, 또는 필터 대상이면 None

        Raises:
            SchemaError: 필수 필드 누락 또는 라벨 값 이상
        """
        if getattr(record, self._config.filter_if_null) is None:
            return None

        missing = [f for f in self._config.required_fields if getattr(record, f, None) is None]
        if missing:
            raise SchemaError(
                f"필수 필드 누락: {missing}",
                customer_id=record.customer_id, field=missing[0],
            )

        try:
            label = self._label_encoder.encode(getattr(record, self._config.label_source))
        except ValueError as e:
            raise SchemaError(
                str(e), customer_id=record.customer_id, field=self._config.label_source,
            ) from e

        values = {name: getattr(record, name) for name in self._config.numerical}
        for name, (source, encoder) in self._flag_encoders.items():
            values[name] = encoder.encode(getattr(record, source))
        values[self._config.label_name] = label

        return FeatureRecord(customer_id=record.customer_id, **values)

    # ================================================================
    # 모델 입력 변환
    # ================================================================

    @staticmethod
    def to_frame(
            features: Sequence[FeatureRecord], config: FeatureConfig = FEATURE_CONFIG,
    ) -> pd.DataFrame:
        """FeatureRecord 목록 → DataFrame (customer_id 컬럼 포함)"""
        columns = ["customer_id"] + config.feature_names + [config.label_name]
        return pd.DataFrame([asdict(f) for f in features], columns=columns)

    @staticmethod
    def from_frame(df: pd.DataFrame, config: FeatureConfig = FEATURE_CONFIG) -> list[FeatureRecord]:
        """to_frame() 의 역변환 (CSV 스냅샷 로드용). config 에 없는 컬럼은 무시합니다."""
        columns = config.feature_names + [config.label_name]
        records = []
        for row in df.to_dict("records"):
            values = {k: _FIELD_TYPES[k](row[k]) for k in columns}
            records.append(FeatureRecord(customer_id=str(row["customer_id"]), **values))
        return records

    @staticmethod
    def to_matrix(
            features: Sequence[FeatureRecord], config: FeatureConfig = FEATURE_CONFIG,
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        FeatureRecord 목록 → (X, y).

        Returns:
            X: [N, n_features] float32, y: [N] int
        """
        names = config.feature_names
        X = np.array([f.features(names) for f in features], dtype=np.float32).reshape(-1, len(names))
        y = np.array([getattr(f, config.label_name) for f in features], dtype=int)
        return X, y

    # ================================================================
    # 내부
    # ================================================================

    def _encode_chunk(self, records: Sequence[RawRecord]) -> EncodeResult:
        partial = EncodeResult()
        for record in records:
            try:
                feature = self.encode_one(record)
            except SchemaError as e:
                logger.warning("인코딩 제외 (%s): %s", record.customer_id, e.message)
                partial.errors.append(e.to_record())
                continue

            if feature is None:
                partial.filtered.append(
                    FilteredRecord(record.customer_id, f"{self._config.filter_if_null} is null")
                )
            else:
                partial.features.append(feature)
        return partial

    def _merge(self, partials: list[EncodeResult]) -> EncodeResult:
        """청크 결과를 순서대로 합치고 식별자 중복을 SchemaError 로 분리합니다."""
        merged = EncodeResult()
        seen: set[str] = set()
        for partial in partials:
            merged.filtered.extend(partial.filtered)
            merged.errors.extend(partial.errors)
            for feature in partial.features:
                if feature.customer_id in seen:
                    err = SchemaError(
                        f"중복 식별자: {feature.customer_id}",
                        customer_id=feature.customer_id, field="customer_id",
                    )
                    logger.warning("인코딩 제외 (%s): %s", feature.customer_id, err.message)
                    merged.errors.append(err.to_record())
                    continue
                seen.add(feature.customer_id)
                merged.features.append(feature)
        return merged


def _split_chunks(items: list, n: int) -> list[list]:
    """리스트를 순서를 유지한 채 n개 이하의 연속 구간으로 나눕니다."""
    size = max(1, -(-len(items) // n))
    return [items[i:i + size] for i in range(0, len(items), size)]


_FIELD_TYPES = {f.name: f.type for f in fields(FeatureRecord)}


def _check_record_fields(config: FeatureConfig) -> None:
    """설정의 피처/라벨 이름이 FeatureRecord 필드와 정확히 같은지 확인합니다."""
    expected = set(_FIELD_TYPES) - {"customer_id"}
    configured = set(config.feature_names) | {config.label_name}
    if configured != expected:
        raise ValueError(
            f"FeatureConfig 피처가 FeatureRecord 와 다릅니다: "
            f"누락 {sorted(expected - configured)}, 초과 {sorted(configured - expected)}"
        )
