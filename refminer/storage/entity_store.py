"""Entity store clients: load entities and persist staged citations."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

import httpx

from refminer.errors import AuthenticationError, EntityLoadError
from refminer.models import (
    Citation,
    DateValue,
    Entity,
    EntityReference,
    Statement,
    TextValue,
    PRECISION_DAY,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REFERENCE_URL_KEY = "P854"
RETRIEVED_KEY = "P813"
GREGORIAN_CALENDAR = "http://www.wikidata.org/entity/Q1985727"
LABEL_BATCH_SIZE = 50


class BaseEntityStore(ABC):
    """
    Abstract entity store.

    load() returns a full Entity or raises EntityLoadError; save() persists
    the entity's pending citations and reports success as a bool.
    """

    @abstractmethod
    async def load(self, entity_id: str) -> Entity:
        pass

    @abstractmethod
    async def save(self, entity: Entity) -> bool:
        pass


# ============================================================================
# Wikibase JSON mapping
# ============================================================================

def parse_datavalue(datavalue: Dict[str, Any], labels_by_id: Dict[str, List[str]]):
    """
    Convert a Wikibase datavalue into an AttributeValue.

    Args:
        datavalue: {"type": ..., "value": ...}
        labels_by_id: Entity id -> labels, used for references

    Returns:
        EntityReference, DateValue, TextValue, or None for unsupported types
    """
    value_type = datavalue.get("type")
    value = datavalue.get("value")

    if value_type == "wikibase-entityid":
        entity_id = value.get("id") or f"Q{value.get('numeric-id')}"
        return EntityReference(entity_id=entity_id, labels=tuple(labels_by_id.get(entity_id, ())))
    if value_type == "time":
        try:
            return DateValue.from_wikibase_time(value["time"], int(value.get("precision", PRECISION_DAY)))
        except (KeyError, ValueError):
            return None
    if value_type == "monolingualtext":
        return TextValue(text=value.get("text", ""), language=value.get("language"))
    if value_type == "string":
        return TextValue(text=value)
    return None


def _reference_urls(claim: Dict[str, Any]) -> List[str]:
    urls = []
    for reference in claim.get("references", []):
        for snak in reference.get("snaks", {}).get(REFERENCE_URL_KEY, []):
            url = snak.get("datavalue", {}).get("value")
            if isinstance(url, str):
                urls.append(url)
    return urls


def referenced_entity_ids(data: Dict[str, Any]) -> Set[str]:
    """Collect the ids of all entities referenced by an entity's claims."""
    ids = set()
    for claims in data.get("claims", {}).values():
        for claim in claims:
            datavalue = claim.get("mainsnak", {}).get("datavalue", {})
            if datavalue.get("type") == "wikibase-entityid":
                value = datavalue["value"]
                ids.add(value.get("id") or f"Q{value.get('numeric-id')}")
    return ids


def entity_from_wikibase(data: Dict[str, Any], labels_by_id: Optional[Dict[str, List[str]]] = None) -> Entity:
    """
    Build an Entity from a wbgetentities entity document.

    Claims without a value (novalue/somevalue) or of unsupported datatypes
    are left out.

    Args:
        data: Entity JSON
        labels_by_id: Labels of referenced entities

    Returns:
        Entity
    """
    labels_by_id = labels_by_id or {}
    statements: Dict[str, List[Statement]] = {}

    for attribute_key, claims in data.get("claims", {}).items():
        for claim in claims:
            mainsnak = claim.get("mainsnak", {})
            if mainsnak.get("snaktype") != "value":
                continue
            value = parse_datavalue(mainsnak.get("datavalue", {}), labels_by_id)
            if value is None:
                continue
            statements.setdefault(attribute_key, []).append(Statement(
                statement_id=claim.get("id", ""),
                attribute_key=attribute_key,
                value=value,
                reference_urls=_reference_urls(claim),
            ))

    return Entity(
        entity_id=data["id"],
        labels={lang: label["value"] for lang, label in data.get("labels", {}).items()},
        statements=statements,
        sitelinks={site: link["title"] for site, link in data.get("sitelinks", {}).items()},
    )


def labels_from_wikibase(data: Dict[str, Any]) -> List[str]:
    """All labels and aliases of an entity document, de-duplicated in order."""
    labels = [label["value"] for label in data.get("labels", {}).values()]
    for aliases in data.get("aliases", {}).values():
        labels.extend(alias["value"] for alias in aliases)
    return list(dict.fromkeys(labels))


def citation_snaks(citation: Citation) -> Dict[str, Any]:
    """Reference snaks for a citation: reference URL plus retrieved date."""
    retrieved = citation.retrieved_at or datetime.utcnow()
    return {
        REFERENCE_URL_KEY: [{
            "snaktype": "value",
            "property": REFERENCE_URL_KEY,
            "datavalue": {"value": citation.source_url, "type": "string"},
        }],
        RETRIEVED_KEY: [{
            "snaktype": "value",
            "property": RETRIEVED_KEY,
            "datavalue": {
                "value": {
                    "time": retrieved.strftime("+%Y-%m-%dT00:00:00Z"),
                    "timezone": 0,
                    "before": 0,
                    "after": 0,
                    "precision": PRECISION_DAY,
                    "calendarmodel": GREGORIAN_CALENDAR,
                },
                "type": "time",
            },
        }],
    }


# ============================================================================
# Stores
# ============================================================================

class WikibaseEntityStore(BaseEntityStore):
    """Entity store backed by the Wikibase action API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_url: str = "https://www.wikidata.org/w/api.php",
        label_languages: Sequence[str] = ("en",),
        edit_summary: str = "Adding references found via structured data on linked pages"
    ):
        """
        Args:
            client: HTTP client (keeps the login session cookies)
            api_url: Wikibase api.php endpoint
            label_languages: Languages of referenced-entity labels to load
            edit_summary: Summary attached to each reference edit
        """
        self.client = client
        self.api_url = api_url
        self.label_languages = tuple(label_languages)
        self.edit_summary = edit_summary
        self._csrf_token: Optional[str] = None

    async def _get(self, **params) -> Dict[str, Any]:
        params.setdefault("format", "json")
        response = await self.client.get(self.api_url, params=params)
        response.raise_for_status()
        return response.json()

    async def _post(self, **data) -> Dict[str, Any]:
        data.setdefault("format", "json")
        response = await self.client.post(self.api_url, data=data)
        response.raise_for_status()
        return response.json()

    async def login(self, username: str, password: str):
        """
        Log in with a bot password.

        Raises:
            AuthenticationError: If the API rejects the credentials or is unreachable
        """
        try:
            token_data = await self._get(action="query", meta="tokens", type="login")
            login_token = token_data["query"]["tokens"]["logintoken"]
            result = await self._post(
                action="login", lgname=username, lgpassword=password, lgtoken=login_token
            )
        except (httpx.HTTPError, ValueError, KeyError) as e:
            raise AuthenticationError(f"Failed to log in to {self.api_url}: {e}") from e

        status = result.get("login", {}).get("result")
        if status != "Success":
            reason = result.get("login", {}).get("reason", status)
            raise AuthenticationError(f"Failed to log in to {self.api_url}: {reason}")
        logger.info(f"Logged in to {self.api_url} as {username}")

    async def load(self, entity_id: str) -> Entity:
        """
        Load an entity with its claims and sitelinks.

        Raises:
            EntityLoadError: If the entity is missing or the request fails
        """
        try:
            payload = await self._get(
                action="wbgetentities", ids=entity_id, props="labels|claims|sitelinks"
            )
        except (httpx.HTTPError, ValueError) as e:
            raise EntityLoadError(f"Failed to load {entity_id}: {e}") from e

        if "error" in payload:
            raise EntityLoadError(f"Failed to load {entity_id}: {payload['error'].get('info')}")

        data = payload.get("entities", {}).get(entity_id)
        if not data or "missing" in data:
            raise EntityLoadError(f"Entity not found: {entity_id}")

        labels_by_id = await self.load_labels(referenced_entity_ids(data))
        return entity_from_wikibase(data, labels_by_id)

    async def load_labels(self, entity_ids: Iterable[str]) -> Dict[str, List[str]]:
        """
        Fetch labels and aliases for many entities, batched.

        Raises:
            EntityLoadError: If a batch request fails
        """
        ids = sorted(entity_ids)
        labels_by_id: Dict[str, List[str]] = {}
        for start in range(0, len(ids), LABEL_BATCH_SIZE):
            batch = ids[start:start + LABEL_BATCH_SIZE]
            try:
                payload = await self._get(
                    action="wbgetentities",
                    ids="|".join(batch),
                    props="labels|aliases",
                    languages="|".join(self.label_languages),
                )
            except (httpx.HTTPError, ValueError) as e:
                raise EntityLoadError(f"Failed to load labels: {e}") from e
            for entity_id, data in payload.get("entities", {}).items():
                labels_by_id[entity_id] = labels_from_wikibase(data)
        return labels_by_id

    async def _get_csrf_token(self) -> str:
        if self._csrf_token is None:
            data = await self._get(action="query", meta="tokens")
            self._csrf_token = data["query"]["tokens"]["csrftoken"]
        return self._csrf_token

    async def save(self, entity: Entity) -> bool:
        """
        Write every pending citation as a reference on its statement.

        Successfully written citations are removed from the pending list;
        failed ones stay there.

        Returns:
            True if all pending citations were written
        """
        if not entity.pending_citations:
            return True

        try:
            token = await self._get_csrf_token()
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error(f"Failed to get edit token for {entity.entity_id}: {e}")
            return False

        failed: List[Citation] = []
        for citation in entity.pending_citations:
            try:
                result = await self._post(
                    action="wbsetreference",
                    statement=citation.statement_id,
                    snaks=json.dumps(citation_snaks(citation)),
                    token=token,
                    bot=1,
                    summary=self.edit_summary,
                )
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Failed to add reference to {citation.statement_id}: {e}")
                failed.append(citation)
                continue

            if result.get("success") != 1:
                info = result.get("error", {}).get("info", "unknown error")
                logger.error(f"Failed to add reference to {citation.statement_id}: {info}")
                failed.append(citation)
                continue

            self._mark_cited(entity, citation)

        entity.pending_citations = failed
        return not failed

    @staticmethod
    def _mark_cited(entity: Entity, citation: Citation):
        for statement in entity.get_statements(citation.attribute_key):
            if statement.statement_id == citation.statement_id:
                statement.reference_urls.append(citation.source_url)


class DryRunEntityStore(BaseEntityStore):
    """Load through another store; saving only clears the pending citations."""

    def __init__(self, loader: BaseEntityStore):
        self.loader = loader
        self.saved: List[Citation] = []

    async def load(self, entity_id: str) -> Entity:
        return await self.loader.load(entity_id)

    async def save(self, entity: Entity) -> bool:
        for citation in entity.pending_citations:
            logger.info(f"[dry-run] {citation.statement_id} <- {citation.source_url}")
        self.saved.extend(entity.pending_citations)
        entity.pending_citations = []
        return True
