"""
📁 src/utils/exceptions.py
===========================
레코드 단위 에러 분류.

[역할] 배치 안의 한 레코드만 실패시키는 에러를 정의합니다.
       어떤 에러도 배치 전체를 중단시키지 않습니다.
       각 단계는 성공 결과와 함께 RecordError 리스트를 반환합니다.

분류:
  - SchemaError: 필수 필드 누락 / 타입 오류 / 식별자 중복 (해당 레코드만 제외)
  - FilteredRecord: 예상된 제외 (TotalCharges NULL). 에러가 아님, 별도 집계
  - PredictionError: 모델 호출 실패 또는 타임아웃 (해당 레코드만)
  - MissingProbabilityError: 예측 클래스가 확률 맵에 없음
                             (신뢰도만 계산 불가, 혼동행렬에는 포함)
"""

from dataclasses import dataclass
from typing import Any, Optional


class ChurnPipelineError(Exception):
    """파이프라인 레코드 에러의 공통 부모"""

    stage: str = "pipeline"

    def __init__(self, message: str, customer_id: Optional[str] = None):
        super().__init__(message)
        self.customer_id = customer_id
        self.message = message

    def to_record(self) -> "RecordError":
        return RecordError(
            stage=self.stage,
            customer_id=self.customer_id,
            error_type=type(self).__name__,
            message=self.message,
        )


class SchemaError(ChurnPipelineError):
    """입력 레코드가 스키마를 만족하지 않음"""

    stage = "schema"

    def __init__(self, message: str, customer_id: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message, customer_id)
        self.field = field


class PredictionError(ChurnPipelineError):
    """외부 모델 호출 실패 또는 타임아웃"""

    stage = "predict"


class MissingProbabilityError(ChurnPipelineError):
    """예측 클래스의 확률이 모델 응답에 없음"""

    stage = "confidence"

    def __init__(self, message: str, customer_id: Optional[str] = None, predicted_class: Any = None):
        super().__init__(message, customer_id)
        self.predicted_class = predicted_class


@dataclass(frozen=True)
class RecordError:
    """배치 결과에 실리는 레코드 에러 한 건"""
    stage: str
    customer_id: Optional[str]
    error_type: str
    message: str

    def to_dict(self) -> dict:
        return {
            "stage": self.stage,
            "customer_id": self.customer_id,
            "error_type": self.error_type,
            "message": self.message,
        }


@dataclass(frozen=True)
class FilteredRecord:
    """에러가 아닌 예상된 제외 (예: TotalCharges NULL)"""
    customer_id: str
    reason: str
