"""
tests/unit/test_utils.py
==========================
로깅 / 타이머 / 파일 I/O / 에러 분류 단위 테스트.
"""

import json
import logging

import pandas as pd
import pytest


class TestLogger:

    def test_run_id_filter_tags_records(self):
        from src.utils.logger import RunIdFilter, set_run_id
        set_run_id("3f2a9c1d-aaaa-bbbb")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert RunIdFilter().filter(record) is True
        assert record.run_id == "3f2a9c1d"
        set_run_id(None)

    def test_setup_logging_writes_file(self, tmp_path):
        from src.utils.logger import get_logger, set_run_id, setup_logging
        log_file = tmp_path / "logs" / "pipeline.log"
        setup_logging(level="DEBUG", log_file=str(log_file))
        set_run_id("abcdef1234")

        get_logger("churn.test").info("인코딩 시작: %d건", 3)
        for h in logging.getLogger().handlers:
            h.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "[abcdef12]" in text
        assert "인코딩 시작: 3건" in text
        set_run_id(None)
        logging.getLogger().handlers.clear()


class TestTimer:

    def test_timed_records_elapsed(self):
        from src.utils.timer import timed
        timings = {}
        with timed("분할", timings):
            pass
        assert "분할" in timings and timings["분할"] >= 0

    def test_timed_propagates_and_still_records(self):
        from src.utils.timer import timed
        timings = {}
        with pytest.raises(KeyError):
            with timed("학습", timings):
                raise KeyError("x")
        assert "학습" in timings

    def test_timer_decorator_returns_value(self):
        from src.utils.timer import timer

        @timer("덧셈")
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"


class TestIO:

    def test_csv_json_pickle(self, tmp_path):
        from src.utils import io
        df = pd.DataFrame({"customer_id": ["A", "B"], "tenure": [1, 2]})

        io.save_csv(df, str(tmp_path / "a" / "df.csv"))
        assert io.load_csv(str(tmp_path / "a" / "df.csv")).equals(df)

        io.save_json({"혼동행렬": [1, 2]}, str(tmp_path / "r.json"))
        assert json.loads((tmp_path / "r.json").read_text(encoding="utf-8")) == {"혼동행렬": [1, 2]}

        io.save_pickle({"k": 1}, str(tmp_path / "m.pkl"))
        assert io.load_pickle(str(tmp_path / "m.pkl")) == {"k": 1}

    def test_failed_write_keeps_previous_file(self, tmp_path):
        """직렬화 실패 시 기존 파일은 그대로, 임시 파일은 남지 않는다"""
        from src.utils import io
        path = tmp_path / "model.pkl"
        io.save_pickle({"version": 1}, str(path))

        with pytest.raises(Exception):
            io.save_pickle(lambda: None, str(path))

        assert io.load_pickle(str(path)) == {"version": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["model.pkl"]


class TestErrors:

    def test_to_record(self):
        from src.utils.exceptions import SchemaError
        err = SchemaError("필수 필드 누락", customer_id="C1", field="tenure")
        record = err.to_record()

        assert record.to_dict() == {
            "stage": "schema", "customer_id": "C1",
            "error_type": "SchemaError", "message": "필수 필드 누락",
        }
        assert err.field == "tenure"

    def test_all_record_errors_share_base(self):
        from src.utils.exceptions import (
            ChurnPipelineError, MissingProbabilityError, PredictionError, SchemaError,
        )
        for cls in (SchemaError, PredictionError, MissingProbabilityError):
            assert issubclass(cls, ChurnPipelineError)
