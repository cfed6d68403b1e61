"""
📁 src/features/splitter.py
=============================
Train/Test 분할 모듈.

[역할] 피처 데이터셋을 서로소인 train/test 로 나눕니다.

분할 방식:
  - 기본 (Bernoulli): 레코드마다 독립적으로 확률 p 로 train 에 포함
    → 웨어하우스의 SAMPLE(80) 과 같은 "근사" 분할입니다.
      train/test 크기는 정확히 p·N, (1-p)·N 이 아닙니다.
  - exact=True: sklearn train_test_split 으로 정확한 개수 분할

공통 규칙:
  - test = 전체 - train (customer_id 기준 차집합) → 서로소 + 합집합 = 전체 보장
  - 같은 (데이터셋, p, seed) → 같은 train. seed=None 이면 재현 불가
  - p >= 1.0 → test 비어 있음, p <= 0.0 → train 비어 있음 (둘 다 정상)
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

import numpy as np
from sklearn.model_selection import train_test_split

from src.features.builder import FeatureRecord
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Dataset:
    """이름이 붙은 FeatureRecord 묶음 (순서 유지, 식별자 유일, 불변)"""
    name: str
    records: tuple[FeatureRecord, ...]

    def __post_init__(self):
        # list 로 넘겨도 불변 tuple 로 고정
        object.__setattr__(self, "records", tuple(self.records))
        ids = [r.customer_id for r in self.records]
        if len(ids) != len(set(ids)):
            raise ValueError(f"데이터셋 {self.name!r} 에 중복 식별자가 있습니다")

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[FeatureRecord]:
        return iter(self.records)

    @property
    def ids(self) -> list[str]:
        return [r.customer_id for r in self.records]

    def labels(self) -> dict[str, int]:
        """customer_id → 실제 라벨"""
        return {r.customer_id: r.churn_label for r in self.records}


class DatasetSplitter:
    """
    데이터셋 분할기.

    사용법:
        splitter = DatasetSplitter(train_fraction=0.8, seed=42)
        train, test = splitter.split(dataset)
    """

    def __init__(self, train_fraction: float = 0.8, seed: Optional[int] = None, exact: bool = False):
        if isinstance(train_fraction, bool) or not isinstance(train_fraction, (int, float)):
            raise TypeError(f"train_fraction 은 숫자여야 합니다: {train_fraction!r}")
        self._p = float(train_fraction)
        self._seed = seed
        self._exact = exact

    def split(self, dataset: Dataset) -> tuple[Dataset, Dataset]:
        """
        Returns:
            (train, test). 둘 다 원래 순서를 유지합니다.
        """
        if self._p >= 1.0:
            train_ids = set(dataset.ids)
        elif self._p <= 0.0:
            train_ids = set()
        elif self._exact:
            train_ids = self._exact_ids(dataset.ids)
        else:
            train_ids = self._bernoulli_ids(dataset.ids)

        train = Dataset("train", [r for r in dataset if r.customer_id in train_ids])
        # test 는 차집합으로 정의 (샘플링 방식과 무관하게 서로소/전체 보장)
        test = Dataset("test", [r for r in dataset if r.customer_id not in train_ids])

        logger.info(
            "데이터 분할 (%s, p=%.2f, seed=%s): train=%d, test=%d",
            "exact" if self._exact else "approx", self._p, self._seed, len(train), len(test),
        )
        return train, test

    def _bernoulli_ids(self, ids: Sequence[str]) -> set[str]:
        """레코드마다 독립 샘플링. 근사 분할임을 알립니다."""
        rng = np.random.default_rng(self._seed)
        draws = rng.random(len(ids))
        logger.debug("근사 분할: 기대 train 크기 %.1f", self._p * len(ids))
        return {cid for cid, u in zip(ids, draws) if u < self._p}

    def _exact_ids(self, ids: Sequence[str]) -> set[str]:
        n_train = int(np.floor(self._p * len(ids)))
        # train_test_split 은 한쪽이 비는 분할을 거부하므로 직접 처리
        if n_train == 0:
            return set()
        if n_train >= len(ids):
            return set(ids)
        train_ids, _ = train_test_split(
            list(ids), train_size=n_train, random_state=self._seed, shuffle=True,
        )
        return set(train_ids)
