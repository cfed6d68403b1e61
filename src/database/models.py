"""
📁 src/database/models.py
============================
SQLAlchemy ORM 모델 정의.

웨어하우스 테이블을 그대로 옮긴 구조입니다.

raw_customers 테이블: CSV 원본 적재 결과
churn_features 테이블: 인코딩된 피처 (모델 입력)
churn_predictions 테이블: 테스트셋 예측 + 신뢰도
training_runs 테이블: 파이프라인 실행 이력 (분할 크기, 메트릭)
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, JSON, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class RawCustomer(Base):
    """고객 원본 레코드"""
    __tablename__ = "raw_customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(String(32), nullable=False, index=True)

    gender = Column(String(10))
    senior_citizen = Column(Integer)
    partner = Column(String(5))
    dependents = Column(String(5))
    tenure = Column(Integer)
    phone_service = Column(String(5))
    multiple_lines = Column(String(20))
    internet_service = Column(String(20))
    online_security = Column(String(20))
    online_backup = Column(String(20))
    device_protection = Column(String(20))
    tech_support = Column(String(20))
    streaming_tv = Column(String(20))
    streaming_movies = Column(String(20))
    contract = Column(String(20))
    paperless_billing = Column(String(5))
    payment_method = Column(String(40))
    monthly_charges = Column(Float)
    total_charges = Column(Float)
    churn = Column(String(5))

    pipeline_run_id = Column(String(36), index=True)
    loaded_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<RawCustomer({self.customer_id}, churn={self.churn})>"


class ChurnFeature(Base):
    """인코딩된 피처 레코드"""
    __tablename__ = "churn_features"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(String(32), nullable=False, index=True)

    senior_citizen = Column(Integer, nullable=False)
    tenure = Column(Integer, nullable=False)
    monthly_charges = Column(Float, nullable=False)
    total_charges = Column(Float, nullable=False)
    gender_male = Column(Integer, nullable=False)
    has_partner = Column(Integer, nullable=False)
    has_dependents = Column(Integer, nullable=False)
    paperless_billing = Column(Integer, nullable=False)
    churn_label = Column(Integer, nullable=False)

    pipeline_run_id = Column(String(36), index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<ChurnFeature({self.customer_id}, label={self.churn_label})>"


class ChurnPrediction(Base):
    """테스트셋 예측 결과"""
    __tablename__ = "churn_predictions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String(36), nullable=False, index=True)
    customer_id = Column(String(32), nullable=False, index=True)

    actual = Column(String(20))
    predicted = Column(String(20))
    confidence = Column(Float)           # 신뢰도 추출 실패 시 NULL
    probabilities = Column(JSON)

    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<ChurnPrediction({self.customer_id}, {self.actual}→{self.predicted})>"


class TrainingRun(Base):
    """파이프라인 실행 이력"""
    __tablename__ = "training_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    run_id = Column(String(36), nullable=False, unique=True)
    pipeline_run_id = Column(String(36))

    # 모델 정보
    model_type = Column(String(50), nullable=False, index=True)

    # 데이터 분할
    train_size = Column(Integer)
    test_size = Column(Integer)
    train_fraction = Column(Float)
    split_seed = Column(Integer)

    # 아티팩트 경로
    model_path = Column(String(500))

    # 설정/결과 (JSON)
    hyperparameters = Column(JSON)
    metrics = Column(JSON)
    report = Column(JSON)                # 분포 + 혼동행렬

    # 상태
    status = Column(String(20), default="started", index=True)
    error_message = Column(Text)

    # 시각
    started_at = Column(DateTime, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime)

    def __repr__(self):
        return f"<TrainingRun({self.run_id}, {self.model_type}, {self.status})>"
