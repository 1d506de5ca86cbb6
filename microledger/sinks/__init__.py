"""Output sinks for exporting ledger records and events."""

from microledger.sinks.console import ConsoleSink
from microledger.sinks.json_file import JsonFileSink
from microledger.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink"]
