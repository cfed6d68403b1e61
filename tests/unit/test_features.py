"""
📁 tests/unit/test_features.py
================================
인코더 / 피처 빌더 단위 테스트.

실행: pytest tests/unit/test_features.py -v
"""

import numpy as np
import pytest

from src.features.builder import FeatureBuilder


class TestEncoders:
    """0/1 인코더 테스트"""

    def test_equality_flag(self):
        from src.features.encoders import EqualityFlagEncoder
        enc = EqualityFlagEncoder("Male")

        assert enc.encode("Male") == 1
        assert enc.encode("Female") == 0
        assert enc.encode(None) == 0

    def test_label_encoder_rejects_unknown_value(self):
        """허용 값 밖의 라벨은 0으로 바꾸지 않고 에러"""
        from src.features.encoders import BinaryLabelEncoder
        enc = BinaryLabelEncoder("Yes", ("No", "Yes"))

        assert enc.encode("Yes") == 1
        assert enc.encode("No") == 0
        with pytest.raises(ValueError):
            enc.encode("Maybe")

    def test_label_encoder_positive_must_be_allowed(self):
        from src.features.encoders import BinaryLabelEncoder
        with pytest.raises(ValueError):
            BinaryLabelEncoder("True", ("No", "Yes"))

    def test_factory_builds_flag_encoder(self):
        from config.feature_config import FlagSpec
        from src.features.encoders import EncoderFactory, EqualityFlagEncoder
        enc = EncoderFactory.create(FlagSpec("has_partner", "partner", "Yes"))

        assert isinstance(enc, EqualityFlagEncoder)
        assert enc.literal == "Yes"


class TestFeatureBuilder:
    """FeatureBuilder.build 테스트"""

    def test_build_partitions_records(self, raw_records):
        """정상 3건 → 피처, NULL TotalCharges 1건 → 필터, tenure 누락 1건 → 에러"""
        result = FeatureBuilder().build(raw_records)

        assert [f.customer_id for f in result.features] == ["0001-A", "0002-B", "0003-C"]
        assert [r.customer_id for r in result.filtered] == ["0004-D"]
        assert result.n_filtered == 1
        assert len(result.errors) == 1
        assert result.errors[0].customer_id == "0005-E"
        assert result.errors[0].error_type == "SchemaError"

    def test_every_input_is_accounted_for(self, raw_records):
        result = FeatureBuilder().build(raw_records)
        assert len(result.features) + result.n_filtered + len(result.errors) == len(raw_records)

    def test_flag_encoding(self, raw_records):
        """gender/partner/dependents/paperless 플래그와 라벨 값 확인"""
        features = {f.customer_id: f for f in FeatureBuilder().build(raw_records).features}

        a = features["0001-A"]
        assert (a.gender_male, a.has_partner, a.has_dependents, a.paperless_billing) == (1, 0, 0, 1)
        assert a.churn_label == 1

        b = features["0002-B"]
        assert (b.gender_male, b.has_partner, b.has_dependents, b.paperless_billing) == (0, 1, 1, 0)
        assert b.churn_label == 0

    def test_flags_are_binary(self, feature_dataset):
        for f in feature_dataset:
            for name in ("gender_male", "has_partner", "has_dependents", "paperless_billing", "churn_label"):
                assert getattr(f, name) in (0, 1)

    def test_numerics_retained(self, raw_records):
        c = {f.customer_id: f for f in FeatureBuilder().build(raw_records).features}["0003-C"]
        assert c.tenure == 60
        assert c.total_charges == pytest.approx(1800.5)
        assert c.monthly_charges == pytest.approx(29.85)
        assert c.senior_citizen == 0

    def test_null_total_filtered_before_required_check(self, row_factory):
        """TotalCharges NULL 이면 다른 필드가 비어 있어도 에러가 아닌 필터"""
        from src.preprocessing.loader import parse_rows
        records = parse_rows([row_factory("0001-A", TotalCharges="", tenure="", gender="")]).records
        result = FeatureBuilder().build(records)

        assert result.features == []
        assert result.errors == []
        assert result.n_filtered == 1

    def test_invalid_churn_label_is_schema_error(self, row_factory):
        from src.preprocessing.loader import parse_rows
        records = parse_rows([row_factory("0001-A", Churn="Maybe"), row_factory("0002-B")]).records
        result = FeatureBuilder().build(records)

        assert [f.customer_id for f in result.features] == ["0002-B"]
        assert result.errors[0].customer_id == "0001-A"
        assert "Maybe" in result.errors[0].message

    def test_missing_required_field_raises_in_encode_one(self, row_factory):
        from src.preprocessing.loader import parse_rows
        from src.utils.exceptions import SchemaError
        record = parse_rows([row_factory("0001-A", MonthlyCharges="")]).records[0]

        with pytest.raises(SchemaError) as exc:
            FeatureBuilder().encode_one(record)
        assert exc.value.field == "monthly_charges"

    def test_duplicate_identifier_rejected(self, row_factory):
        """같은 식별자가 두 번 들어오면 두 번째는 에러"""
        from src.preprocessing.schemas import RawRecord
        record = RawRecord.model_validate(row_factory("0001-A"))
        result = FeatureBuilder().build([record, record])

        assert len(result.features) == 1
        assert len(result.errors) == 1
        assert "중복" in result.errors[0].message

    def test_parallel_build_matches_serial(self, telco_frame):
        """워커 수와 무관하게 같은 결과 (입력 순서 유지)"""
        from src.preprocessing.loader import parse_frame
        records = parse_frame(telco_frame).records

        serial = FeatureBuilder(n_workers=1).build(records)
        parallel = FeatureBuilder(n_workers=4).build(records)

        assert parallel.features == serial.features
        assert parallel.filtered == serial.filtered
        assert parallel.errors == serial.errors

    def test_config_must_match_feature_record(self):
        """FeatureRecord 에 없는 피처 구성은 생성 시점에 거절"""
        from config.feature_config import FEATURE_CONFIG, FlagSpec
        from dataclasses import replace
        dropped = replace(FEATURE_CONFIG, flags=FEATURE_CONFIG.flags[:3])
        extra = replace(FEATURE_CONFIG, flags=FEATURE_CONFIG.flags + (FlagSpec("fiber", "internet_service", "Fiber optic"),))

        with pytest.raises(ValueError, match="paperless_billing"):
            FeatureBuilder(config=dropped)
        with pytest.raises(ValueError, match="fiber"):
            FeatureBuilder(config=extra)

    def test_config_literal_override(self, row_factory):
        """같은 피처 이름이면 비교 리터럴만 바꿔 적용 가능"""
        from config.feature_config import FEATURE_CONFIG, FlagSpec
        from dataclasses import replace
        from src.preprocessing.schemas import RawRecord
        flags = tuple(
            FlagSpec(f.name, f.source, "Female") if f.name == "gender_male" else f
            for f in FEATURE_CONFIG.flags
        )
        builder = FeatureBuilder(config=replace(FEATURE_CONFIG, flags=flags))
        feature = builder.encode_one(RawRecord.model_validate(row_factory("0001-A", gender="Female")))

        assert feature.gender_male == 1


class TestModelInput:
    """to_matrix / to_frame 변환 테스트"""

    def test_to_matrix_shapes(self, raw_records):
        from config.feature_config import FEATURE_CONFIG
        features = FeatureBuilder().build(raw_records).features
        X, y = FeatureBuilder.to_matrix(features)

        assert X.shape == (3, len(FEATURE_CONFIG.feature_names))
        assert X.dtype == np.float32
        assert y.tolist() == [1, 0, 0]

    def test_to_matrix_empty(self):
        X, y = FeatureBuilder.to_matrix([])
        assert X.shape[0] == 0
        assert y.shape == (0,)

    def test_frame_restores_records(self, raw_records):
        features = FeatureBuilder().build(raw_records).features
        df = FeatureBuilder.to_frame(features)

        assert list(df.columns)[0] == "customer_id"
        assert FeatureBuilder.from_frame(df) == features

    def test_from_frame_ignores_extra_columns(self, raw_records):
        """DB 조회 결과처럼 추가 컬럼이 있어도 설정된 컬럼만 읽음"""
        features = FeatureBuilder().build(raw_records).features
        df = FeatureBuilder.to_frame(features)
        df["pipeline_run_id"] = "run-1"

        assert FeatureBuilder.from_frame(df) == features
