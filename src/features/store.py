"""
📁 src/features/store.py
=========================
피처 저장소.

[패턴] Repository — 분할된 데이터셋의 저장/로드를 추상화
[역할] train/test 데이터셋을 CSV 스냅샷으로 저장하고 다시 Dataset 으로 로드합니다.
"""

from pathlib import Path

from config.settings import get_settings
from src.features.builder import FeatureBuilder
from src.features.splitter import Dataset
from src.utils.logger import get_logger
from src.utils import io

logger = get_logger(__name__)


class FeatureStore:
    """
    피처 저장소.

    사용법:
        store = FeatureStore()
        store.save_splits(train, test)       # 05_model_input/train.csv, test.csv
        test = store.load("test")
    """

    def __init__(self, base_dir: str = None):
        self._dir = base_dir or get_settings().DATA_MODEL_INPUT

    def save(self, dataset: Dataset) -> str:
        """데이터셋 1개 저장. 저장 경로 반환."""
        path = f"{self._dir}/{dataset.name}.csv"
        io.save_csv(FeatureBuilder.to_frame(dataset.records), path)
        return path

    def save_splits(self, train: Dataset, test: Dataset) -> dict[str, int]:
        """
        Returns:
            각 세트의 크기 {"train": 5600, "test": 1400}
        """
        for ds in (train, test):
            self.save(ds)
        sizes = {"train": len(train), "test": len(test)}
        logger.info("데이터 분할 저장: %s", sizes)
        return sizes

    def load(self, name: str) -> Dataset:
        """
        저장된 데이터셋 로드.

        Args:
            name: "train" | "test" | 저장 시 사용한 이름
        """
        path = f"{self._dir}/{name}.csv"
        if not Path(path).exists():
            raise FileNotFoundError(f"데이터셋 없음: {path}")
        df = io.load_csv(path, dtype={"customer_id": str})
        return Dataset(name, FeatureBuilder.from_frame(df))
