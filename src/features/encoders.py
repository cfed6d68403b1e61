"""
📁 src/features/encoders.py
=============================
범주형 → 0/1 인코딩 모듈.

[패턴] Strategy — 인코딩 방식을 교체 가능하게 분리합니다.
[위치] builder.py에서 호출하여 사용합니다.

인코딩 방식:
  - EqualityFlagEncoder: 값 == 리터럴 이면 1, 아니면 0 (gender == "Male" 등)
  - BinaryLabelEncoder: 허용 값 집합 안에서만 0/1 변환 (Churn Yes/No)

스무딩이나 one-hot 확장은 하지 않습니다. 학습(fit) 단계도 없습니다.
규칙이 고정되어 있으므로 학습/추론 시 데이터 누수가 생길 여지가 없습니다.
"""

from abc import ABC, abstractmethod
from typing import Optional

from config.feature_config import FlagSpec
from src.utils.logger import get_logger

logger = get_logger(__name__)


# ================================================================
# 인코더 인터페이스 (Strategy 패턴)
# ================================================================
class BaseEncoder(ABC):
    """인코더 공통 인터페이스. 값 하나 → 0 또는 1"""

    @abstractmethod
    def encode(self, value: Optional[str]) -> int:
        ...


class EqualityFlagEncoder(BaseEncoder):
    """
    리터럴 하나와의 동등 비교.

    사용법:
        enc = EqualityFlagEncoder("Male")
        enc.encode("Male")    # 1
        enc.encode("Female")  # 0
    """

    def __init__(self, literal: str):
        self._literal = literal

    @property
    def literal(self) -> str:
        return self._literal

    def encode(self, value: Optional[str]) -> int:
        return 1 if value == self._literal else 0


class BinaryLabelEncoder(BaseEncoder):
    """
    타겟 라벨 인코더.

    허용 값이 아니면 ValueError (조용히 0으로 만들지 않습니다).
    """

    def __init__(self, positive: str, allowed: tuple[str, ...]):
        if positive not in allowed:
            raise ValueError(f"positive 값 {positive!r} 이 허용 값 {allowed} 에 없습니다")
        self._positive = positive
        self._allowed = frozenset(allowed)

    def encode(self, value: Optional[str]) -> int:
        if value not in self._allowed:
            raise ValueError(f"허용되지 않은 라벨 값: {value!r} (허용: {sorted(self._allowed)})")
        return 1 if value == self._positive else 0


# ================================================================
# 인코더 팩토리
# ================================================================
class EncoderFactory:
    """[패턴] Factory — 피처 정의로부터 인코더를 생성합니다."""

    @staticmethod
    def create(spec: FlagSpec) -> BaseEncoder:
        logger.debug("플래그 인코더: %s = (%s == %r)", spec.name, spec.source, spec.literal)
        return EqualityFlagEncoder(spec.literal)
