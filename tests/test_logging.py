"""Tests for fpa_kernel.logging_config: JSON records, estimate context, setup."""

import json
import logging
from io import StringIO
from uuid import uuid4

import pytest

from fpa_engines.team_size import TeamSizeEstimator
from fpa_kernel.domain.values import ComplexityTier, ComponentKind, RiskLevel
from fpa_kernel.exceptions import InvalidConfigError, InvalidGSCError, InvalidInputError
from fpa_kernel.logging_config import (
    CONTEXT_FIELDS,
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _isolated_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def json_lines():
    """Configure logging into a buffer; returns a reader of parsed records."""
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    configure_logging(handler=handler, level=logging.DEBUG)

    def read() -> list[dict]:
        return [json.loads(line) for line in buffer.getvalue().splitlines() if line]

    return read


class TestRecordShape:

    def test_envelope(self, json_lines):
        get_logger("engines.effort").info("metrics_calculated")
        record = json_lines()[0]
        assert record["message"] == "metrics_calculated"
        assert record["level"] == "INFO"
        assert record["logger"] == "fpa_kernel.engines.effort"
        assert record["ts"].endswith("+00:00")

    def test_extras_become_top_level_keys(self, json_lines):
        get_logger("engines.effort").info("metrics_calculated", extra={"pfna": 14, "fa": 1.0})
        record = json_lines()[0]
        assert (record["pfna"], record["fa"]) == (14, 1.0)

    def test_enums_by_value(self, json_lines):
        get_logger("engines.risk").info("risk_assessed", extra={
            "overall_risk": RiskLevel.HIGH,
            "tier": ComplexityTier.AVERAGE,
        })
        record = json_lines()[0]
        assert record["overall_risk"] == "high"
        assert record["tier"] == "average"

    def test_dataclasses_and_enum_keys(self, json_lines):
        recommendation = TeamSizeEstimator().estimate(pfa=100, productivity_factor=10)
        get_logger("test").info("snapshot", extra={
            "team": recommendation,
            "points_by_kind": {ComponentKind.INPUT: 4},
        })
        record = [r for r in json_lines() if r["message"] == "snapshot"][0]
        assert record["team"]["recommended"] == 3
        assert record["points_by_kind"] == {"EI": 4}

    def test_uuid_and_tuple(self, json_lines):
        uid = uuid4()
        get_logger("test").info("ids", extra={"run_id": uid, "indices": (1, 5)})
        record = json_lines()[0]
        assert record["run_id"] == str(uid)
        assert record["indices"] == [1, 5]

    def test_unserialisable_value_falls_back_to_str(self, json_lines):
        get_logger("test").info("odd", extra={"payload": object()})
        assert json_lines()[0]["payload"].startswith("<object object")


class TestExceptionFields:

    def test_plain_exception(self, json_lines):
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").exception("failed")
        record = json_lines()[0]
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record
        assert "Traceback" in record["traceback"]

    def test_input_error_attributes(self, json_lines):
        try:
            raise InvalidInputError("ALI", "record_types", 0, 1)
        except InvalidInputError:
            get_logger("test").exception("classification_error")
        record = json_lines()[0]
        assert record["exc_code"] == "INVALID_INPUT"
        assert (record["exc_kind"], record["exc_field"], record["exc_value"]) == ("ALI", "record_types", 0)
        assert record["exc_minimum"] == 1

    def test_problem_lists(self, json_lines):
        logger = get_logger("test")
        try:
            raise InvalidConfigError(["Team size must be greater than 0"])
        except InvalidConfigError:
            logger.exception("config_error")
        try:
            raise InvalidGSCError((9,), ["bad length"])
        except InvalidGSCError:
            logger.exception("gsc_error")
        config_record, gsc_record = json_lines()
        assert config_record["exc_problems"] == ["Team size must be greater than 0"]
        assert gsc_record["exc_code"] == "INVALID_GSC"
        assert gsc_record["exc_values"] == [9]


class TestLogContext:

    def test_bound_fields_on_every_record(self, json_lines):
        LogContext.set(correlation_id="req-1", estimate_id="EST-7")
        get_logger("engines.trend").info("trend_analyzed")
        get_logger("services.estimation").info("estimate_calculated")
        for record in json_lines():
            assert record["correlation_id"] == "req-1"
            assert record["estimate_id"] == "EST-7"

    def test_absent_when_unset(self, json_lines):
        get_logger("test").info("bare")
        record = json_lines()[0]
        assert not set(CONTEXT_FIELDS) & set(record)

    def test_values_stored_as_strings(self):
        LogContext.set(estimate_version=3, policy_name="default", estimate_id=None)
        assert LogContext.get_all() == {"estimate_version": "3", "policy_name": "default"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_nests_and_restores(self):
        LogContext.set(estimate_id="outer")
        with LogContext.bind(estimate_id="inner", estimate_version=2):
            assert LogContext.get_all() == {"estimate_id": "inner", "estimate_version": "2"}
        assert LogContext.get_all() == {"estimate_id": "outer"}

    def test_bind_skips_none(self):
        with LogContext.bind(estimate_id=None):
            assert LogContext.get_all() == {}

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(estimate_id="failing"):
                raise RuntimeError("boom")
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="Unknown log context field"):
            LogContext.set(actor_id="a")


class TestConfiguration:

    def test_second_configure_is_ignored(self):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert len(logging.getLogger("fpa_kernel").handlers) == 1

    def test_formatter_installed(self):
        handler = logging.StreamHandler(StringIO())
        configure_logging(handler=handler)
        assert isinstance(handler.formatter, StructuredFormatter)

    def test_default_level_drops_debug(self):
        buffer = StringIO()
        configure_logging(handler=logging.StreamHandler(buffer))
        get_logger("test").debug("hidden")
        get_logger("test").info("shown")
        assert [json.loads(line)["message"] for line in buffer.getvalue().splitlines()] == ["shown"]

    def test_level_by_name(self):
        configure_logging(handler=logging.StreamHandler(StringIO()), level="debug")
        assert logging.getLogger("fpa_kernel").level == logging.DEBUG

    def test_reset(self):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        reset_logging()
        root = logging.getLogger("fpa_kernel")
        assert root.handlers == []
        assert root.propagate is True
