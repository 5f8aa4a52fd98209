"""SPARQL query-service client for selecting entities and vocabularies."""

import logging
import re
from typing import Dict, List, Sequence

import httpx

from refminer.errors import ConfigurationError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_QUERY_PART = re.compile(r"^(P\d+):(Q\d+)$")
_ENTITY_URI = re.compile(r"/entity/(Q\d+)$")


def build_query_part(part: str) -> str:
    """
    Turn a "P31:Q11424" fragment into a triple pattern.

    Raw triple patterns (anything not in the short form) pass through.

    Raises:
        ConfigurationError: If the fragment is empty
    """
    part = part.strip()
    if not part:
        raise ConfigurationError("Empty SPARQL query part")
    match = _QUERY_PART.match(part)
    if match:
        return f"?item wdt:{match.group(1)} wd:{match.group(2)} ."
    return part if part.endswith(".") else part + " ."


def entity_id_from_uri(uri: str) -> str:
    match = _ENTITY_URI.search(uri)
    return match.group(1) if match else uri


class SparqlQueryRunner:
    """Run simple SELECT queries against a Wikibase query service."""

    def __init__(self, client: httpx.AsyncClient, endpoint: str = "https://query.wikidata.org/sparql"):
        self.client = client
        self.endpoint = endpoint

    async def select(self, query: str) -> List[Dict[str, str]]:
        """
        Run a SELECT query.

        Returns:
            One dict per result row, variable -> value
        """
        response = await self.client.get(
            self.endpoint,
            params={"query": query, "format": "json"},
            headers={"Accept": "application/sparql-results+json"},
        )
        response.raise_for_status()
        rows = response.json().get("results", {}).get("bindings", [])
        return [{name: cell["value"] for name, cell in row.items()} for row in rows]

    async def get_entity_ids_for_query_parts(self, parts: Sequence[str]) -> List[str]:
        """
        Resolve query fragments (joined with AND) into entity ids.

        Args:
            parts: Fragments such as "P31:Q11424"

        Returns:
            Distinct entity ids
        """
        patterns = "\n  ".join(build_query_part(p) for p in parts)
        query = f"SELECT DISTINCT ?item WHERE {{\n  {patterns}\n}}"
        rows = await self.select(query)
        ids = list(dict.fromkeys(entity_id_from_uri(row["item"]) for row in rows if "item" in row))
        logger.info(f"Query matched {len(ids)} entities")
        return ids

    async def get_ids_and_labels_for_instance_of(self, class_id: str, language: str = "en") -> Dict[str, str]:
        """
        Labels of every instance of a class.

        Args:
            class_id: Class entity id (e.g., "Q201658" for film genre)
            language: Label language

        Returns:
            Entity id -> label
        """
        query = (
            "SELECT ?item ?itemLabel WHERE {\n"
            f"  ?item wdt:P31 wd:{class_id} .\n"
            f"  SERVICE wikibase:label {{ bd:serviceParam wikibase:language \"{language}\" . }}\n"
            "}"
        )
        rows = await self.select(query)
        labels = {}
        for row in rows:
            entity_id = entity_id_from_uri(row.get("item", ""))
            label = row.get("itemLabel")
            # The label service falls back to the id when no label exists
            if label and label != entity_id:
                labels[entity_id] = label
        logger.info(f"Loaded {len(labels)} labels for instances of {class_id}")
        return labels
