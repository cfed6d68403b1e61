"""
모델 하이퍼파라미터 정의.

모델을 교체하거나 튜닝할 때 이 파일만 수정하면 됩니다.
XGBoostAdapter 는 to_params() 결과를 그대로 XGBClassifier 에 넘깁니다.
"""

from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True)
class XGBoostConfig:
    """XGBoost 이진 분류기 하이퍼파라미터"""
    n_estimators: int = 200
    max_depth: int = 5
    learning_rate: float = 0.1
    subsample: float = 0.8
    colsample_bytree: float = 0.8
    min_child_weight: int = 1
    objective: str = "binary:logistic"
    eval_metric: str = "logloss"
    random_state: int = 42
    n_jobs: int = 1                  # 배치 추론이 스레드 풀을 쓰므로 모델 내부 병렬은 끔

    def to_params(self) -> dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides) -> "XGBoostConfig":
        """일부 값만 바꾼 사본 (튜닝 실험용)"""
        return replace(self, **overrides)


# ── 전역 인스턴스 ──
XGBOOST_CONFIG = XGBoostConfig()
