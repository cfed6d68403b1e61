"""
📁 src/models/xgboost_model.py
================================
XGBoost 기반 이탈(churn) 분류 어댑터.

[패턴] Strategy — ModelAdapter 인터페이스를 구현
[역할] 웨어하우스의 XGBoost 분류 모델 객체를 로컬 xgboost 라이브러리로 대체

특징:
  - 이진 분류 (churn_label 0/1), 예측 클래스 = 라벨 값 그대로
  - 클래스별 확률 맵 반환 (신뢰도 계산용)
  - Feature Importance 확인 가능 (SHOW_FEATURE_IMPORTANCE 대응)
"""

from typing import Any

import numpy as np
import xgboost as xgb

from config.feature_config import FEATURE_CONFIG
from config.model_config import XGBOOST_CONFIG, XGBoostConfig
from src.features.builder import FeatureBuilder, FeatureRecord
from src.features.splitter import Dataset
from src.models.base import ModelAdapter, ModelHandle, ModelOutput
from src.utils.logger import get_logger
from src.utils import io

logger = get_logger(__name__)


class XGBoostAdapter(ModelAdapter):
    """
    XGBoost 이진 분류기.

    사용법:
        adapter = XGBoostAdapter()
        handle = adapter.train(train_dataset)
        out = adapter.predict(handle, test_dataset.records[0])
        adapter.save(handle, "models/registry/churn_xgb")
    """

    def __init__(self, config: XGBoostConfig = None):
        self._params = (config or XGBOOST_CONFIG).to_params()

    @property
    def name(self) -> str:
        return "XGBoostAdapter"

    def train(self, dataset: Dataset) -> ModelHandle:
        if len(dataset) == 0:
            raise ValueError("학습 데이터셋이 비어 있습니다")

        X, y = FeatureBuilder.to_matrix(dataset.records)
        logger.info("=== XGBoost 학습 시작: %d건 × %d피처 ===", *X.shape)

        model = xgb.XGBClassifier(**self._params)
        model.fit(X, y, verbose=False)

        handle = ModelHandle(
            model_type="xgboost",
            estimator=model,
            feature_names=FEATURE_CONFIG.feature_names,
            classes=[int(c) for c in model.classes_],
            n_train=len(dataset),
        )
        logger.info("=== XGBoost 학습 완료 (model=%s) ===", handle.model_id[:8])
        return handle

    def predict(self, handle: ModelHandle, record: FeatureRecord) -> ModelOutput:
        if handle is None or handle.estimator is None:
            raise RuntimeError("학습되지 않은 모델")

        x = np.array([record.features(handle.feature_names)], dtype=np.float32)
        proba = handle.estimator.predict_proba(x)[0]

        probabilities = {cls: float(p) for cls, p in zip(handle.classes, proba)}
        predicted = handle.classes[int(np.argmax(proba))]
        return ModelOutput(predicted_class=predicted, probabilities=probabilities)

    def save(self, handle: ModelHandle, path: str) -> None:
        io.save_pickle(handle, f"{path}.pkl")
        logger.info("모델 저장: %s.pkl", path)

    def load(self, path: str) -> ModelHandle:
        handle = io.load_pickle(f"{path}.pkl")
        logger.info("모델 로드: %s.pkl (model=%s)", path, handle.model_id[:8])
        return handle

    def get_feature_importance(self, handle: ModelHandle, top_k: int = None) -> list[tuple[str, float]]:
        """피처 중요도 (내림차순). top_k 지정 시 상위 k개만."""
        scores = handle.estimator.feature_importances_
        ranked = sorted(
            ((name, float(s)) for name, s in zip(handle.feature_names, scores)),
            key=lambda x: -x[1],
        )
        return ranked[:top_k] if top_k else ranked

    def get_info(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": "xgboost",
            "params": self._params,
        }
