"""Local DuckDB log of saved citations."""

import logging
from typing import List, Optional

import duckdb

from refminer.models import Citation

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class CitationStore:
    """
    Append-only audit log of citations that were saved.

    Citations are keyed by their deterministic citation_id, so recording the
    same citation twice is a no-op.
    """

    def __init__(self, db_path: str = "citations.duckdb"):
        """
        Initialize DuckDB connection and create schema.

        Args:
            db_path: Path to the DuckDB database file
        """
        self.db_path = db_path
        self.conn = duckdb.connect(db_path)
        self._create_schema()
        logger.info(f"CitationStore initialized at {db_path}")

    def _create_schema(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS citations (
                citation_id VARCHAR PRIMARY KEY,
                entity_id VARCHAR NOT NULL,
                attribute_key VARCHAR NOT NULL,
                statement_id VARCHAR NOT NULL,
                source_url VARCHAR NOT NULL,
                retrieved_at TIMESTAMP,
                recorded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_citations_entity ON citations(entity_id)"
        )
        self.conn.commit()

    def has_citation(self, citation_id: str) -> bool:
        result = self.conn.execute(
            "SELECT 1 FROM citations WHERE citation_id = ?", [citation_id]
        ).fetchone()
        return result is not None

    def record_citations(self, citations: List[Citation]) -> int:
        """
        Record saved citations.

        Args:
            citations: Citations that were persisted

        Returns:
            Number of citations not previously recorded
        """
        recorded = 0
        for citation in citations:
            if self.has_citation(citation.citation_id):
                continue
            self.conn.execute("""
                INSERT INTO citations
                (citation_id, entity_id, attribute_key, statement_id, source_url, retrieved_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, [
                citation.citation_id,
                citation.entity_id,
                citation.attribute_key,
                citation.statement_id,
                citation.source_url,
                citation.retrieved_at,
            ])
            recorded += 1

        self.conn.commit()
        if recorded:
            logger.info(f"Recorded {recorded} citations")
        return recorded

    def list_citations(self, entity_id: Optional[str] = None) -> List[Citation]:
        """
        List recorded citations, optionally for one entity.

        Args:
            entity_id: Optional entity filter

        Returns:
            Citations ordered by entity, attribute and URL
        """
        query = """
            SELECT citation_id, entity_id, attribute_key, statement_id, source_url, retrieved_at
            FROM citations
        """
        params = []
        if entity_id:
            query += " WHERE entity_id = ?"
            params.append(entity_id)
        query += " ORDER BY entity_id, attribute_key, source_url"

        return [
            Citation(
                citation_id=row[0],
                entity_id=row[1],
                attribute_key=row[2],
                statement_id=row[3],
                source_url=row[4],
                retrieved_at=row[5],
            )
            for row in self.conn.execute(query, params).fetchall()
        ]

    def count_citations(self, entity_id: Optional[str] = None) -> int:
        if entity_id:
            result = self.conn.execute(
                "SELECT COUNT(*) FROM citations WHERE entity_id = ?", [entity_id]
            ).fetchone()
        else:
            result = self.conn.execute("SELECT COUNT(*) FROM citations").fetchone()
        return result[0] if result else 0

    def close(self):
        """Close the database connection."""
        self.conn.close()
        logger.info("CitationStore connection closed")
