#!/usr/bin/env python3
"""Generate a sample loan portfolio.

Runs the portfolio scenario (borrowers, loans and their payment history up
to a given date) and writes borrowers, loans and ledger events to the
chosen sink.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from microledger.config import LedgerConfig, ScenarioConfig
from microledger.exceptions import LedgerError
from microledger.logging import get_logger, setup_logging
from microledger.scenarios import PortfolioScenario
from microledger.service import LedgerService
from microledger.sinks import ConsoleSink, JsonFileSink, KafkaSink
from microledger.sinks.kafka import ProducerConfig

logger = get_logger(__name__)


def build_sink(args: argparse.Namespace, config: LedgerConfig):
    """Create the sink selected on the command line."""
    if args.sink == "console":
        return ConsoleSink(pretty=True, max_records=args.max_print)
    if args.sink == "kafka":
        kafka = config.kafka
        return KafkaSink(
            ProducerConfig(
                bootstrap_servers=args.kafka_bootstrap or kafka.bootstrap_servers,
                acks=kafka.acks,
                batch_size=kafka.batch_size,
                linger_ms=kafka.linger_ms,
                compression=kafka.compression,
                retries=kafka.retries,
                topic_prefix=kafka.topic_prefix,
            )
        )
    output_dir = Path(args.output_dir) if args.output_dir else config.output.json_output_dir
    return JsonFileSink(output_dir, pretty=config.output.pretty_json)


def print_summary(service: LedgerService) -> None:
    """Print generation summary."""
    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    for name, count in service.store.summary().items():
        print(f"{name + ':':18}{count}")
    print("\nPortfolio by status")
    for line in service.store.portfolio_summary():
        print(
            f"  {line.status.value:12}{line.count:6} loans  "
            f"principal={line.total_principal}  outstanding={line.total_outstanding}"
        )
    print("=" * 60)


def main() -> int:
    """Generate and export a sample portfolio."""
    parser = argparse.ArgumentParser(description="Generate a sample loan portfolio")
    parser.add_argument(
        "--borrowers",
        type=int,
        default=20,
        help="Number of borrowers to generate (default: 20)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (default: SEED env or none)",
    )
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Date the payment history runs up to, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--sink",
        choices=["json", "console", "kafka"],
        default="json",
        help="Where to write the portfolio (default: json)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for the json sink (default: OUTPUT_DIR env or ./output)",
    )
    parser.add_argument(
        "--kafka-bootstrap",
        type=str,
        default=None,
        help="Kafka bootstrap servers (default: KAFKA_BOOTSTRAP_SERVERS env)",
    )
    parser.add_argument(
        "--max-print",
        type=int,
        default=5,
        help="Records printed per batch by the console sink (default: 5)",
    )
    args = parser.parse_args()

    config = LedgerConfig.from_env()
    setup_logging(config.log_level)
    seed = args.seed if args.seed is not None else config.seed

    scenario_config = ScenarioConfig(name="sample", num_borrowers=args.borrowers, today=args.today)
    service = LedgerService(config=config.engine)

    try:
        PortfolioScenario(seed=seed, config=scenario_config, service=service).generate()

        sink = build_sink(args, config)
        sink.write_batch("borrowers", list(service.store.borrowers.values()))
        sink.write_batch("loans", [service.store.get_loan(loan_id) for loan_id in service.store.loans])
        service.publish(sink)
        sink.close()
    except LedgerError:
        logger.exception("Sample generation failed")
        return 1

    print_summary(service)
    return 0


if __name__ == "__main__":
    sys.exit(main())
