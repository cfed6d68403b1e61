"""
📁 src/preprocessing/schemas.py
=================================
원본 고객 레코드 스키마 (Pydantic).

[역할] CSV 한 행 = RawRecord 하나. 적재 시점에 타입/범위를 검증합니다.
       customer_id 외의 모든 필드는 비어 있을 수 있습니다(None).
       인코딩에 필요한 필드가 비어 있는지는 FeatureBuilder가 판단합니다.

필드 별칭(alias)은 원본 CSV 헤더 그대로입니다:
    RawRecord.model_validate({"customerID": "7590-VHVEG", "tenure": "1", ...})
    RawRecord(customer_id="7590-VHVEG", tenure=1)   # 속성 이름으로도 생성 가능
"""

from typing import Optional

from pydantic import BaseModel, Field


class RawRecord(BaseModel):
    """통신사 고객 1명 (적재 후 불변)"""

    customer_id: str = Field(..., alias="customerID", min_length=1, description="고객 식별자")

    # 인구통계
    gender: Optional[str] = Field(default=None, alias="gender", description="Male/Female")
    senior_citizen: Optional[int] = Field(default=None, alias="SeniorCitizen", ge=0, le=1)
    partner: Optional[str] = Field(default=None, alias="Partner")
    dependents: Optional[str] = Field(default=None, alias="Dependents")

    # 가입 정보
    tenure: Optional[int] = Field(default=None, alias="tenure", ge=0, description="가입 개월수")
    phone_service: Optional[str] = Field(default=None, alias="PhoneService")
    multiple_lines: Optional[str] = Field(default=None, alias="MultipleLines")
    internet_service: Optional[str] = Field(default=None, alias="InternetService")
    online_security: Optional[str] = Field(default=None, alias="OnlineSecurity")
    online_backup: Optional[str] = Field(default=None, alias="OnlineBackup")
    device_protection: Optional[str] = Field(default=None, alias="DeviceProtection")
    tech_support: Optional[str] = Field(default=None, alias="TechSupport")
    streaming_tv: Optional[str] = Field(default=None, alias="StreamingTV")
    streaming_movies: Optional[str] = Field(default=None, alias="StreamingMovies")
    contract: Optional[str] = Field(default=None, alias="Contract")
    paperless_billing: Optional[str] = Field(default=None, alias="PaperlessBilling")
    payment_method: Optional[str] = Field(default=None, alias="PaymentMethod")

    # 요금
    monthly_charges: Optional[float] = Field(default=None, alias="MonthlyCharges", ge=0)
    total_charges: Optional[float] = Field(default=None, alias="TotalCharges", ge=0)

    # 타겟
    churn: Optional[str] = Field(default=None, alias="Churn", description="이탈 여부 (Yes/No)")

    class Config:
        frozen = True
        populate_by_name = True
        str_strip_whitespace = True
        json_schema_extra = {
            "example": {
                "customerID": "7590-VHVEG", "gender": "Female", "SeniorCitizen": 0,
                "Partner": "Yes", "Dependents": "No", "tenure": 1,
                "PaperlessBilling": "Yes", "MonthlyCharges": 29.85,
                "TotalCharges": 29.85, "Churn": "No",
            }
        }
