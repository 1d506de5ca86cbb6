"""Configuration management for microledger."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

from microledger.exceptions import ConfigurationError


@dataclass(frozen=True)
class EngineConfig:
    """Rounding and tolerance constants for the ledger engine."""

    rounding_unit: Decimal = Decimal("100")  # Installments are floored to this unit
    money_quantum: Decimal = Decimal("0.01")  # Smallest representable amount
    payoff_tolerance: Decimal = Decimal("0.01")  # Interest-only full payoff match
    payoff_floor: Decimal = Decimal("1")  # Remaining balance treated as settled

    def __post_init__(self) -> None:
        for name in ("rounding_unit", "money_quantum", "payoff_tolerance", "payoff_floor"):
            value = getattr(self, name)
            if not isinstance(value, Decimal) or not value.is_finite() or value <= 0:
                raise ConfigurationError(f"{name} must be a positive Decimal, got {value!r}")


DEFAULT_ENGINE_CONFIG = EngineConfig()


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "dev.ledger"


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class ScenarioConfig:
    """Configuration for portfolio scenario execution."""

    name: str
    num_borrowers: int = 50
    loan_penetration: float = 0.8
    interest_only_rate: float = 0.2
    today: date | None = None


@dataclass
class LedgerConfig:
    """Main configuration for microledger."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    scenario: ScenarioConfig | None = None
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        try:
            engine = EngineConfig(
                rounding_unit=Decimal(os.getenv("LEDGER_ROUNDING_UNIT", "100")),
                money_quantum=Decimal(os.getenv("LEDGER_MONEY_QUANTUM", "0.01")),
                payoff_tolerance=Decimal(os.getenv("LEDGER_PAYOFF_TOLERANCE", "0.01")),
                payoff_floor=Decimal(os.getenv("LEDGER_PAYOFF_FLOOR", "1")),
            )
        except InvalidOperation as exc:
            raise ConfigurationError(f"Invalid engine setting: {exc}") from exc

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("TOPIC_PREFIX", "dev.ledger"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            engine=engine,
            kafka=kafka,
            output=output,
            seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
