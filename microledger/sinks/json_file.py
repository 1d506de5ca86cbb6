"""JSON file sink for exporting ledger records to files."""

import json
import logging
from pathlib import Path
from typing import Any

from microledger.exceptions import SinkError
from microledger.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Output records to one JSON file per entity type.

    Batches for the same entity type accumulate; each write rewrites the
    file with every record seen so far.
    """

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._records: dict[str, list[dict]] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to ``<entity_type>.json``."""
        file_path = self.output_dir / f"{entity_type.replace('.', '_')}.json"

        data = self._records.setdefault(entity_type, [])
        data.extend(to_dict(record) for record in records)

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False, default=str)
                else:
                    json.dump(data, f, ensure_ascii=False, default=str)
        except OSError as exc:
            raise SinkError(f"Cannot write {file_path}: {exc}") from exc

        logger.debug("Wrote %d %s records to %s", len(data), entity_type, file_path)

    @property
    def counts(self) -> dict[str, int]:
        return {entity_type: len(data) for entity_type, data in self._records.items()}

    def close(self) -> None:
        """Print summary."""
        print(f"JSON files written to: {self.output_dir}")
        for entity_type, count in self.counts.items():
            print(f"  {entity_type}: {count} records")
