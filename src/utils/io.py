"""
📁 src/utils/io.py
===================
산출물 파일 읽기/쓰기.

[역할] 분할 스냅샷(CSV), 평가 리포트(JSON), 모델 핸들(pickle)을 저장/로드합니다.
       쓰기는 모두 같은 디렉토리의 임시 파일에 쓴 뒤 교체(os.replace)합니다.
       중간에 실패해도 이전 산출물이 반쯤 덮어쓰인 채로 남지 않습니다.
"""

import json
import os
import pickle
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import pandas as pd

from src.utils.logger import get_logger

logger = get_logger(__name__)


@contextmanager
def atomic_path(path: str):
    """임시 경로를 넘겨주고, 블록이 성공하면 path 로 교체합니다."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    os.close(fd)
    try:
        yield tmp
        os.replace(tmp, target)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def save_csv(df: pd.DataFrame, path: str, **kwargs) -> None:
    """DataFrame → CSV (인덱스 제외, UTF-8)"""
    with atomic_path(path) as tmp:
        df.to_csv(tmp, index=False, encoding="utf-8", **kwargs)
    logger.info("CSV 저장: %s (%d행)", path, len(df))


def load_csv(path: str, **kwargs) -> pd.DataFrame:
    df = pd.read_csv(path, encoding="utf-8", **kwargs)
    logger.info("CSV 로드: %s (%d행 × %d열)", path, *df.shape)
    return df


def save_json(obj: Any, path: str) -> None:
    """dict/list → JSON (한글 그대로, 들여쓰기 2, 직렬화 불가 값은 str)"""
    with atomic_path(path) as tmp:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(obj, f, ensure_ascii=False, indent=2, default=str)
    logger.info("JSON 저장: %s", path)


def save_pickle(obj: Any, path: str) -> None:
    """모델 핸들 등 Python 객체 저장"""
    with atomic_path(path) as tmp:
        with open(tmp, "wb") as f:
            pickle.dump(obj, f)
    logger.info("Pickle 저장: %s", path)


def load_pickle(path: str) -> Any:
    with open(path, "rb") as f:
        return pickle.load(f)
