"""
📁 src/preprocessing/loader.py
================================
CSV → RawRecord 적재 모듈.

[역할] 원본 CSV를 읽어 행마다 RawRecord로 검증합니다.
[위치] 01_raw → RawRecord 리스트

적재 정책 (웨어하우스 COPY INTO ... ON_ERROR = CONTINUE 와 동일):
  - 검증 실패 행 → SchemaError 로 기록하고 나머지 행은 계속 적재
  - 빈 문자열 / 공백만 있는 셀 → NULL
    (공개 Telco 데이터는 가입 0개월 고객의 TotalCharges 가 " " 입니다)
  - customerID 중복 → 뒤에 나온 행을 SchemaError 로 제외
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd
from pydantic import ValidationError

from config.feature_config import FEATURE_CONFIG
from src.preprocessing.schemas import RawRecord
from src.utils.exceptions import RecordError, SchemaError
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LoadResult:
    """적재 결과: 성공 레코드 + 행 단위 에러"""
    records: list[RawRecord] = field(default_factory=list)
    errors: list[RecordError] = field(default_factory=list)

    @property
    def n_loaded(self) -> int:
        return len(self.records)


def load_raw_records(path: str) -> LoadResult:
    """
    CSV 파일을 RawRecord 리스트로 적재합니다.

    Args:
        path: UTF-8 CSV 경로 (헤더 행 필수)

    Returns:
        LoadResult(records, errors)
    """
    if not Path(path).exists():
        raise FileNotFoundError(f"CSV 파일 없음: {path}")

    # 모든 컬럼을 문자열로 읽고, NULL 판단은 직접 합니다 ("NA" 같은 값이 NULL로 바뀌지 않도록)
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
    logger.info("CSV 로드: %s (%d행 × %d열)", path, *df.shape)
    return parse_frame(df)


def parse_frame(df: pd.DataFrame) -> LoadResult:
    """DataFrame(문자열 컬럼) → LoadResult"""
    missing = [csv for csv, _ in FEATURE_CONFIG.raw_columns if csv not in df.columns]
    if missing:
        logger.warning("CSV에 없는 컬럼 (%d개, 모든 행에서 NULL): %s", len(missing), missing)

    return parse_rows(df.to_dict("records"))


def parse_rows(rows: Iterable[dict[str, Any]]) -> LoadResult:
    """행 딕셔너리(CSV 헤더 키) 목록을 검증합니다."""
    result = LoadResult()
    seen: set[str] = set()

    for line_no, row in enumerate(rows, start=2):  # 1행은 헤더
        cleaned = {k: _to_null(v) for k, v in row.items()}
        customer_id = cleaned.get("customerID")

        try:
            record = _validate(cleaned, customer_id, line_no)
            if record.customer_id in seen:
                raise SchemaError(
                    f"{line_no}행: 중복 식별자 {record.customer_id}",
                    customer_id=record.customer_id, field="customer_id",
                )
        except SchemaError as e:
            logger.warning("적재 제외: %s", e.message)
            result.errors.append(e.to_record())
            continue

        seen.add(record.customer_id)
        result.records.append(record)

    logger.info("적재 완료: 성공 %d건, 에러 %d건", len(result.records), len(result.errors))
    return result


def _validate(row: dict[str, Any], customer_id: Optional[str], line_no: int) -> RawRecord:
    """pydantic 검증 에러 → SchemaError 변환"""
    try:
        return RawRecord.model_validate(row)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first["loc"])
        raise SchemaError(
            f"{line_no}행: {loc} 검증 실패 ({first['msg']})",
            customer_id=customer_id, field=loc,
        ) from e


def _to_null(value: Any) -> Any:
    """빈 문자열 / 공백 / NaN → None, 나머지 문자열은 앞뒤 공백 제거"""
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value
