"""Append-only record of entities already processed."""

import logging
from pathlib import Path
from typing import Set

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ProcessedLedger:
    """
    Durable set of processed entity identifiers.

    One identifier per line in a plain-text file. The file is read once when
    the ledger is opened and only ever appended to afterwards. A single
    process is assumed to write it.
    """

    def __init__(self, path: str):
        """
        Load the ledger.

        Args:
            path: Ledger file path (created on first append)
        """
        self.path = Path(path)
        self._ids: Set[str] = set()

        if self.path.exists():
            with open(self.path, 'r', encoding='utf-8') as f:
                self._ids = {line.strip() for line in f if line.strip()}

        logger.info(f"ProcessedLedger loaded {len(self._ids)} ids from {self.path}")

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def mark_processed(self, entity_id: str):
        """
        Append an entity id.

        Args:
            entity_id: Entity identifier (e.g., "Q42")
        """
        with open(self.path, 'a', encoding='utf-8') as f:
            f.write(entity_id + "\n")
        self._ids.add(entity_id)
