"""
피처 정의서.

원본 CSV 컬럼, 유지할 수치형 피처, 이진 플래그 인코딩, 타겟을 한 곳에서 관리합니다.
피처 이름과 순서는 FeatureRecord 필드와 맞아야 합니다 (FeatureBuilder 가 생성 시 검사).
비교 리터럴과 라벨 값은 설정만 바꿔 적용할 수 있습니다.

[패턴] Single Source of Truth — 피처 정보가 코드 곳곳에 흩어지는 것을 방지
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FlagSpec:
    """이진 플래그 하나 = 원본 컬럼이 특정 리터럴과 같은지 여부"""
    name: str      # 피처 이름 (예: gender_male)
    source: str    # RawRecord 속성 이름 (예: gender)
    literal: str   # 비교 값 (예: "Male")


@dataclass(frozen=True)
class FeatureConfig:
    """피처 설정. frozen=True → 실수로 변경 방지"""

    # ── 원본 CSV 헤더 → RawRecord 속성 ──
    raw_columns: tuple[tuple[str, str], ...] = (
        ("customerID", "customer_id"),
        ("gender", "gender"),
        ("SeniorCitizen", "senior_citizen"),
        ("Partner", "partner"),
        ("Dependents", "dependents"),
        ("tenure", "tenure"),                        # 가입 개월수
        ("PhoneService", "phone_service"),
        ("MultipleLines", "multiple_lines"),
        ("InternetService", "internet_service"),
        ("OnlineSecurity", "online_security"),
        ("OnlineBackup", "online_backup"),
        ("DeviceProtection", "device_protection"),
        ("TechSupport", "tech_support"),
        ("StreamingTV", "streaming_tv"),
        ("StreamingMovies", "streaming_movies"),
        ("Contract", "contract"),
        ("PaperlessBilling", "paperless_billing"),
        ("PaymentMethod", "payment_method"),
        ("MonthlyCharges", "monthly_charges"),       # 월 요금
        ("TotalCharges", "total_charges"),           # 누적 요금 (NULL 가능)
        ("Churn", "churn"),                          # 타겟 (Yes/No)
    )

    # ── 그대로 유지하는 수치형 피처 ──
    numerical: tuple[str, ...] = (
        "senior_citizen",
        "tenure",
        "monthly_charges",
        "total_charges",
    )

    # ── 이진 플래그 (단순 동등 비교, one-hot 확장 없음) ──
    flags: tuple[FlagSpec, ...] = (
        FlagSpec("gender_male", "gender", "Male"),
        FlagSpec("has_partner", "partner", "Yes"),
        FlagSpec("has_dependents", "dependents", "Yes"),
        FlagSpec("paperless_billing", "paperless_billing", "Yes"),
    )

    # ── 타겟 ──
    label_source: str = "churn"
    label_name: str = "churn_label"
    label_positive: str = "Yes"
    label_values: tuple[str, ...] = ("No", "Yes")

    # NULL 이면 에러가 아니라 조용히 제외되는 필드
    filter_if_null: str = "total_charges"

    @property
    def feature_names(self) -> list[str]:
        """모델 입력 피처 목록 (순서 고정)"""
        return list(self.numerical) + [f.name for f in self.flags]

    @property
    def required_fields(self) -> list[str]:
        """인코딩에 반드시 필요한 RawRecord 속성 (filter_if_null 제외)"""
        fields = [c for c in self.numerical if c != self.filter_if_null]
        fields += [f.source for f in self.flags]
        fields.append(self.label_source)
        return list(dict.fromkeys(fields))


# 전역 설정 인스턴스
FEATURE_CONFIG = FeatureConfig()
