"""
📁 tests/conftest.py
=====================
pytest 공통 설정 파일.

[역할] 모든 테스트에서 공유하는 픽스처(fixture)를 정의합니다.
       pytest가 자동으로 이 파일을 로드합니다.

[패턴] Fixture — 테스트에 필요한 객체를 미리 생성하여 주입
"""

import sys
from pathlib import Path

import pytest
import numpy as np
import pandas as pd

# 프로젝트 루트를 경로에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

CSV_HEADER = [
    "customerID", "gender", "SeniorCitizen", "Partner", "Dependents", "tenure",
    "PhoneService", "MultipleLines", "InternetService", "OnlineSecurity",
    "OnlineBackup", "DeviceProtection", "TechSupport", "StreamingTV",
    "StreamingMovies", "Contract", "PaperlessBilling", "PaymentMethod",
    "MonthlyCharges", "TotalCharges", "Churn",
]


def make_row(customer_id: str, **overrides) -> dict:
    """CSV 헤더 키를 가진 정상 행 1개 (문자열 값)"""
    row = {
        "customerID": customer_id, "gender": "Female", "SeniorCitizen": "0",
        "Partner": "Yes", "Dependents": "No", "tenure": "12",
        "PhoneService": "Yes", "MultipleLines": "No", "InternetService": "DSL",
        "OnlineSecurity": "No", "OnlineBackup": "Yes", "DeviceProtection": "No",
        "TechSupport": "No", "StreamingTV": "No", "StreamingMovies": "No",
        "Contract": "Month-to-month", "PaperlessBilling": "Yes",
        "PaymentMethod": "Electronic check", "MonthlyCharges": "29.85",
        "TotalCharges": "358.2", "Churn": "No",
    }
    row.update(overrides)
    return row


def make_telco_frame(n: int = 120, seed: int = 42) -> pd.DataFrame:
    """
    Telco 형태의 합성 데이터.

    짧은 가입기간 + 높은 월요금 고객이 이탈하도록 만들어 두 클래스가 모두 나옵니다.
    """
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n):
        tenure = int(rng.integers(0, 72))
        monthly = round(float(rng.uniform(18, 118)), 2)
        churn = "Yes" if (tenure < 12 and monthly > 60) or rng.random() < 0.1 else "No"
        rows.append(make_row(
            f"{i:04d}-TEST",
            gender=str(rng.choice(["Male", "Female"])),
            SeniorCitizen=str(int(rng.random() < 0.2)),
            Partner=str(rng.choice(["Yes", "No"])),
            Dependents=str(rng.choice(["Yes", "No"])),
            tenure=str(tenure),
            PaperlessBilling=str(rng.choice(["Yes", "No"])),
            MonthlyCharges=str(monthly),
            # 가입 0개월 고객은 원본 데이터처럼 TotalCharges 가 공백
            TotalCharges=" " if tenure == 0 else str(round(monthly * tenure, 2)),
            Churn=churn,
        ))
    return pd.DataFrame(rows, columns=CSV_HEADER)


# ================================================================
# 공통 데이터 픽스처
# ================================================================
@pytest.fixture
def sample_rows() -> list[dict]:
    """정상 행 3개 + TotalCharges NULL 1개 + tenure 누락 1개"""
    return [
        make_row("0001-A", gender="Male", Partner="No", Churn="Yes"),
        make_row("0002-B", Dependents="Yes", PaperlessBilling="No"),
        make_row("0003-C", tenure="60", TotalCharges="1800.5"),
        make_row("0004-D", tenure="0", TotalCharges=" "),
        make_row("0005-E", tenure=""),
    ]


@pytest.fixture
def row_factory():
    """make_row(customer_id, **overrides)"""
    return make_row


@pytest.fixture
def write_csv(tmp_path):
    """행 목록을 CSV 로 저장하고 경로를 돌려주는 함수"""
    def _write(rows: list[dict], name: str = "rows.csv") -> str:
        path = tmp_path / name
        pd.DataFrame(rows, columns=CSV_HEADER).to_csv(path, index=False, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def sample_csv(tmp_path, sample_rows) -> str:
    """sample_rows 를 UTF-8 CSV 로 저장한 경로"""
    path = tmp_path / "telco.csv"
    pd.DataFrame(sample_rows, columns=CSV_HEADER).to_csv(path, index=False, encoding="utf-8")
    return str(path)


@pytest.fixture
def telco_frame() -> pd.DataFrame:
    """make_telco_frame() 기본값 (120행)"""
    return make_telco_frame()


@pytest.fixture
def telco_csv(tmp_path) -> str:
    """학습 가능한 크기의 합성 CSV (120행)"""
    path = tmp_path / "telco_full.csv"
    make_telco_frame().to_csv(path, index=False, encoding="utf-8")
    return str(path)


@pytest.fixture
def raw_records(sample_rows):
    """sample_rows → RawRecord 목록"""
    from src.preprocessing.loader import parse_rows
    return parse_rows(sample_rows).records


@pytest.fixture
def feature_dataset():
    """인코딩이 끝난 합성 Dataset (120행 중 필터 제외분)"""
    from src.features.builder import FeatureBuilder
    from src.features.splitter import Dataset
    from src.preprocessing.loader import parse_frame

    loaded = parse_frame(make_telco_frame())
    encoded = FeatureBuilder().build(loaded.records)
    return Dataset("features", encoded.features)


@pytest.fixture
def isolated_settings(tmp_path):
    """산출물 경로를 tmp_path 로 돌린 Settings"""
    from config.settings import Settings
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        DATA_MODEL_INPUT=str(tmp_path / "model_input"),
        MODEL_REGISTRY=str(tmp_path / "registry"),
        REPORT_DIR=str(tmp_path / "reports"),
        LOG_DIR=str(tmp_path / "logs"),
        SPLIT_SEED=7,
        PREDICT_MAX_WORKERS=2,
        PREDICT_TIMEOUT_SECONDS=10.0,
    )


# ================================================================
# DB 픽스처
# ================================================================
@pytest.fixture
def db_engine():
    """SQLite 인메모리 DB 엔진 (단위 테스트용)"""
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool
    from src.database.models import Base
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def mock_get_session(db_engine, monkeypatch):
    """get_session()/get_engine()을 SQLite 인메모리 엔진으로 패치.

    session_scope()가 블록 끝에서 session.close()를 호출하므로,
    매 호출마다 새 세션을 생성해야 합니다.
    같은 engine을 공유하여 인메모리 DB 데이터를 유지합니다.
    """
    from sqlalchemy.orm import sessionmaker
    Session = sessionmaker(bind=db_engine)

    monkeypatch.setattr("src.database.connection.get_session", lambda: Session())
    monkeypatch.setattr("src.database.connection.get_engine", lambda: db_engine)
    return Session()


# ================================================================
# 모델 픽스처
# ================================================================
@pytest.fixture
def trained_xgboost(feature_dataset):
    """(어댑터, 학습된 핸들)"""
    from src.models.xgboost_model import XGBoostAdapter
    adapter = XGBoostAdapter()
    handle = adapter.train(feature_dataset)
    return adapter, handle
