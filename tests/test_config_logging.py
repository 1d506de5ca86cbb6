"""Tests for config and logging."""

import json
import logging
import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterator
from unittest.mock import patch

import pytest

from microledger.config import (
    DEFAULT_ENGINE_CONFIG,
    EngineConfig,
    KafkaConfig,
    LedgerConfig,
    OutputConfig,
    ScenarioConfig,
)
from microledger.exceptions import ConfigurationError
from microledger.logging import JsonFormatter, get_logger, setup_logging

ENV_VARS = [
    "LEDGER_ROUNDING_UNIT",
    "LEDGER_MONEY_QUANTUM",
    "LEDGER_PAYOFF_TOLERANCE",
    "LEDGER_PAYOFF_FLOOR",
    "KAFKA_BOOTSTRAP_SERVERS",
    "KAFKA_ACKS",
    "TOPIC_PREFIX",
    "OUTPUT_DIR",
    "PRETTY_JSON",
    "SEED",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Undo setup_logging changes to the root and package loggers."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    package_level = logging.getLogger("microledger").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("microledger").setLevel(package_level)


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_default_values(self) -> None:
        config = EngineConfig()

        assert config.rounding_unit == Decimal("100")
        assert config.money_quantum == Decimal("0.01")
        assert config.payoff_tolerance == Decimal("0.01")
        assert config.payoff_floor == Decimal("1")
        assert config == DEFAULT_ENGINE_CONFIG

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"rounding_unit": Decimal("0")},
            {"money_quantum": Decimal("-0.01")},
            {"payoff_floor": Decimal("NaN")},
            {"payoff_tolerance": 0.01},
        ],
    )
    def test_rejects_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ConfigurationError):
            EngineConfig(**kwargs)

    def test_is_immutable(self) -> None:
        with pytest.raises(AttributeError):
            DEFAULT_ENGINE_CONFIG.rounding_unit = Decimal("1")


class TestKafkaAndOutputConfig:
    """Tests for KafkaConfig and OutputConfig."""

    def test_kafka_defaults(self) -> None:
        config = KafkaConfig()

        assert config.bootstrap_servers == "localhost:9092"
        assert config.acks == "all"
        assert config.compression == "snappy"
        assert config.topic_prefix == "dev.ledger"

    def test_output_defaults(self) -> None:
        config = OutputConfig()

        assert config.json_output_dir == Path("output")
        assert config.pretty_json is False

    def test_scenario_defaults(self) -> None:
        config = ScenarioConfig(name="test")

        assert config.num_borrowers == 50
        assert config.loan_penetration == 0.8
        assert config.today is None


class TestLedgerConfig:
    """Tests for LedgerConfig.from_env."""

    def test_from_env_default(self, clean_env: None) -> None:
        config = LedgerConfig.from_env()

        assert config.engine == DEFAULT_ENGINE_CONFIG
        assert config.kafka.bootstrap_servers == "localhost:9092"
        assert config.kafka.topic_prefix == "dev.ledger"
        assert config.output.json_output_dir == Path("output")
        assert config.seed is None
        assert config.log_level == "INFO"
        assert config.scenario is None

    def test_from_env_custom(self, clean_env: None) -> None:
        env_vars = {
            "LEDGER_ROUNDING_UNIT": "50",
            "LEDGER_PAYOFF_FLOOR": "10",
            "KAFKA_BOOTSTRAP_SERVERS": "kafka-cluster:9092",
            "KAFKA_ACKS": "1",
            "TOPIC_PREFIX": "prod.ledger",
            "OUTPUT_DIR": "/tmp/ledger",
            "PRETTY_JSON": "true",
            "SEED": "42",
            "LOG_LEVEL": "DEBUG",
        }

        with patch.dict(os.environ, env_vars):
            config = LedgerConfig.from_env()

        assert config.engine.rounding_unit == Decimal("50")
        assert config.engine.payoff_floor == Decimal("10")
        assert config.engine.money_quantum == Decimal("0.01")
        assert config.kafka.bootstrap_servers == "kafka-cluster:9092"
        assert config.kafka.acks == "1"
        assert config.kafka.topic_prefix == "prod.ledger"
        assert config.output.json_output_dir == Path("/tmp/ledger")
        assert config.output.pretty_json is True
        assert config.seed == 42
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_from_env_invalid_engine_setting(self, clean_env: None, value: str) -> None:
        with patch.dict(os.environ, {"LEDGER_ROUNDING_UNIT": value}):
            with pytest.raises(ConfigurationError):
                LedgerConfig.from_env()

    def test_with_scenario(self) -> None:
        config = LedgerConfig(scenario=ScenarioConfig(name="demo", today=date(2024, 12, 31)))

        assert config.scenario.name == "demo"


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self) -> None:
        setup_logging()

        assert logging.getLogger("microledger").level == logging.INFO
        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_invalid_level(self) -> None:
        setup_logging(level="INVALID")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json_format(self) -> None:
        setup_logging(format_type="json")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, JsonFormatter)

    def test_external_loggers_quieted(self) -> None:
        setup_logging(level="DEBUG")

        assert logging.getLogger("confluent_kafka").level == logging.WARNING
        assert logging.getLogger("faker").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def make_record(self, exc_info=None) -> logging.LogRecord:
        return logging.LogRecord(
            name="microledger.service",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Registered payment of %s",
            args=("900",),
            exc_info=exc_info,
        )

    def test_format_basic(self) -> None:
        data = json.loads(JsonFormatter().format(self.make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "microledger.service"
        assert data["message"] == "Registered payment of 900"
        assert "timestamp" in data

    def test_format_with_exception(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            record = self.make_record(exc_info=sys.exc_info())

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError" in data["exception"]

    def test_format_with_extra_decimal(self) -> None:
        record = self.make_record()
        record.extra = {"loan_id": "loan-1", "amount": Decimal("900.50")}

        data = json.loads(JsonFormatter().format(record))

        assert data["loan_id"] == "loan-1"
        assert data["amount"] == "900.50"

    def test_format_with_loan_context(self) -> None:
        logger = logging.getLogger("microledger.service")
        record = logger.makeRecord(
            logger.name,
            logging.INFO,
            __file__,
            1,
            "Cancelled loan %s",
            ("loan-7",),
            None,
            extra={"loan_id": "loan-7"},
        )

        data = json.loads(JsonFormatter().format(record))

        assert data["loan_id"] == "loan-7"
        assert data["message"] == "Cancelled loan loan-7"
        assert "borrower_id" not in data


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger(self) -> None:
        logger = get_logger("microledger.test")

        assert logger is logging.getLogger("microledger.test")


class TestPackageInit:
    """Tests for the package exports."""

    def test_version_exported(self) -> None:
        from microledger import __version__

        assert isinstance(__version__, str)
