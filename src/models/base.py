"""
📁 src/models/base.py
======================
모델 어댑터 추상 인터페이스.

[패턴] Strategy — 모든 분류기가 이 인터페이스를 구현합니다.
                   코드 변경 없이 분류기를 교체할 수 있습니다.
[역할] 웨어하우스 내장 ML 객체(CREATE ... CLASSIFICATION / !PREDICT)를 대체하는 경계.

사용 예:
    adapter: ModelAdapter = XGBoostAdapter()
    handle = adapter.train(train_dataset)
    output = adapter.predict(handle, record)
    output.predicted_class, output.probabilities   # 1, {0: 0.27, 1: 0.73}
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Hashable

from src.features.builder import FeatureRecord
from src.features.splitter import Dataset


@dataclass
class ModelHandle:
    """학습된 모델 1개. 어댑터만 내부 estimator 를 해석합니다."""
    model_type: str
    estimator: Any
    feature_names: list[str]
    classes: list[Hashable]
    n_train: int
    model_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    trained_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def get_info(self) -> dict[str, Any]:
        return {
            "model_id": self.model_id,
            "model_type": self.model_type,
            "n_train": self.n_train,
            "classes": [str(c) for c in self.classes],
            "feature_names": self.feature_names,
            "trained_at": self.trained_at,
        }


@dataclass(frozen=True)
class ModelOutput:
    """레코드 1건에 대한 예측: 클래스 + 클래스별 확률"""
    predicted_class: Hashable
    probabilities: dict[Hashable, float]


class ModelAdapter(ABC):
    """
    외부 분류기 어댑터.

    predict() 는 레코드 단위 호출입니다. 실패할 수 있으며,
    실패/타임아웃 처리는 배치 드라이버(InferencePipeline)가 담당합니다.
    """

    @abstractmethod
    def train(self, dataset: Dataset) -> ModelHandle:
        """학습 데이터셋으로 모델을 학습합니다."""
        ...

    @abstractmethod
    def predict(self, handle: ModelHandle, record: FeatureRecord) -> ModelOutput:
        """레코드 1건 예측"""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """어댑터 이름 (로깅용)"""
        ...

    def save(self, handle: ModelHandle, path: str) -> None:
        """모델 핸들을 파일로 저장 (기본: 미지원)"""
        raise NotImplementedError(f"{self.name} 은 저장을 지원하지 않습니다")

    def load(self, path: str) -> ModelHandle:
        """저장된 모델 핸들 로드 (기본: 미지원)"""
        raise NotImplementedError(f"{self.name} 은 로드를 지원하지 않습니다")

    def get_info(self) -> dict[str, Any]:
        """어댑터 메타정보 (기본 구현, 오버라이드 가능)"""
        return {"name": self.name}
