"""Test Wikibase entity mapping and the entity store clients."""

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from refminer.errors import AuthenticationError, EntityLoadError
from refminer.models import DateValue, EntityReference, TextValue, PRECISION_DAY
from refminer.storage import DryRunEntityStore, WikibaseEntityStore, citation_snaks, entity_from_wikibase

API_URL = "https://wikibase.test/w/api.php"


def entity_claim(statement_id, property_id, target_id, references=()):
    return {
        "id": statement_id,
        "mainsnak": {
            "snaktype": "value",
            "property": property_id,
            "datavalue": {"type": "wikibase-entityid", "value": {"entity-type": "item", "id": target_id}},
        },
        "references": [
            {"snaks": {"P854": [{"snaktype": "value", "datavalue": {"type": "string", "value": url}}]}}
            for url in references
        ],
    }


FILM_DOCUMENT = {
    "id": "Q1",
    "labels": {"en": {"language": "en", "value": "Some Film"}},
    "sitelinks": {
        "enwiki": {"site": "enwiki", "title": "Some Film"},
        "commonswiki": {"site": "commonswiki", "title": "Category:Some Film"},
    },
    "claims": {
        "P31": [entity_claim("Q1$type", "P31", "Q11424")],
        "P57": [entity_claim("Q1$director", "P57", "Q100", references=["http://old.example.com/"])],
        "P577": [{
            "id": "Q1$date",
            "mainsnak": {
                "snaktype": "value",
                "property": "P577",
                "datavalue": {"type": "time", "value": {"time": "+1982-06-25T00:00:00Z", "precision": 11}},
            },
        }],
        "P1476": [{
            "id": "Q1$title",
            "mainsnak": {
                "snaktype": "value",
                "property": "P1476",
                "datavalue": {"type": "monolingualtext", "value": {"text": "Some Film", "language": "en"}},
            },
        }],
        "P161": [{"id": "Q1$unknown", "mainsnak": {"snaktype": "somevalue", "property": "P161"}}],
        "P2047": [{
            "id": "Q1$duration",
            "mainsnak": {
                "snaktype": "value",
                "property": "P2047",
                "datavalue": {"type": "quantity", "value": {"amount": "+117"}},
            },
        }],
    },
}

LABEL_DOCUMENTS = {
    "Q100": {
        "id": "Q100",
        "labels": {"en": {"value": "Jane Director"}},
        "aliases": {"en": [{"value": "J. Director"}, {"value": "Jane Director"}]},
    },
    "Q11424": {"id": "Q11424", "labels": {"en": {"value": "film"}}},
}


def run_with_store(handler, coro_factory):
    """Run coro_factory(store) against a mocked API."""
    async def runner():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            store = WikibaseEntityStore(client, API_URL)
            return await coro_factory(store)

    return asyncio.run(runner())


def wikibase_handler(requests):
    """Serve wbgetentities for FILM_DOCUMENT and its label lookups."""
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        params = request.url.params
        if params.get("action") != "wbgetentities":
            return httpx.Response(400)
        if params.get("props") == "labels|aliases":
            ids = params["ids"].split("|")
            return httpx.Response(200, json={
                "entities": {i: LABEL_DOCUMENTS[i] for i in ids if i in LABEL_DOCUMENTS}
            })
        if params["ids"] == "Q1":
            return httpx.Response(200, json={"entities": {"Q1": FILM_DOCUMENT}})
        return httpx.Response(200, json={"entities": {params["ids"]: {"id": params["ids"], "missing": ""}}})
    return handler


# ============================================================================
# JSON mapping
# ============================================================================

def test_entity_from_wikibase():
    entity = entity_from_wikibase(FILM_DOCUMENT, {"Q100": ["Jane Director"]})

    assert entity.entity_id == "Q1"
    assert entity.labels == {"en": "Some Film"}
    assert entity.sitelinks == {"enwiki": "Some Film", "commonswiki": "Category:Some Film"}

    director = entity.get_statements("P57")[0]
    assert director.value == EntityReference("Q100", ("Jane Director",))
    assert director.reference_urls == ["http://old.example.com/"]

    assert entity.get_values("P577") == [DateValue(1982, 6, 25, PRECISION_DAY)]
    assert entity.get_values("P1476") == [TextValue("Some Film", "en")]
    assert entity.get_statements("P161") == [], "somevalue snaks are left out"
    assert entity.get_statements("P2047") == [], "Unsupported datatypes are left out"


def test_citation_snaks():
    entity = entity_from_wikibase(FILM_DOCUMENT)
    entity.stage_citation(entity.get_statements("P57")[0], "http://films.example.com/x")

    snaks = citation_snaks(entity.pending_citations[0])

    assert snaks["P854"][0]["datavalue"]["value"] == "http://films.example.com/x"
    retrieved = snaks["P813"][0]["datavalue"]["value"]
    assert retrieved["precision"] == PRECISION_DAY
    assert retrieved["time"].endswith("T00:00:00Z")


# ============================================================================
# WikibaseEntityStore
# ============================================================================

def test_load_resolves_labels():
    requests = []

    entity = run_with_store(wikibase_handler(requests), lambda store: store.load("Q1"))

    assert entity.get_values("P57") == [EntityReference("Q100", ("Jane Director", "J. Director"))]
    assert entity.get_values("P31") == [EntityReference("Q11424", ("film",))]
    assert len(requests) == 2, "One entity request plus one batched label request"


def test_load_missing_entity():
    with pytest.raises(EntityLoadError):
        run_with_store(wikibase_handler([]), lambda store: store.load("Q404"))


def test_load_api_error():
    def handler(request):
        return httpx.Response(200, json={"error": {"code": "no-such-entity", "info": "Could not find"}})

    with pytest.raises(EntityLoadError, match="Could not find"):
        run_with_store(handler, lambda store: store.load("Q1"))


def test_load_transport_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(EntityLoadError):
        run_with_store(handler, lambda store: store.load("Q1"))


def login_handler(result):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"query": {"tokens": {"logintoken": "abc+\\"}}})
        form = parse_qs(request.content.decode())
        assert form["lgtoken"] == ["abc+\\"]
        return httpx.Response(200, json={"login": result})
    return handler


def test_login_success():
    run_with_store(
        login_handler({"result": "Success", "lgusername": "Bot"}),
        lambda store: store.login("Bot@refs", "secret"),
    )


def test_login_failure():
    with pytest.raises(AuthenticationError, match="Incorrect"):
        run_with_store(
            login_handler({"result": "Failed", "reason": "Incorrect password"}),
            lambda store: store.login("Bot@refs", "wrong"),
        )


def test_save_writes_references():
    posted = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"query": {"tokens": {"csrftoken": "token+\\"}}})
        form = parse_qs(request.content.decode())
        posted.append(form)
        if form["statement"] == ["Q1$date"]:
            return httpx.Response(200, json={"error": {"code": "failed", "info": "Edit conflict"}})
        return httpx.Response(200, json={"success": 1})

    async def save(store):
        entity = entity_from_wikibase(FILM_DOCUMENT)
        entity.stage_citation(entity.get_statements("P57")[0], "http://films.example.com/x")
        entity.stage_citation(entity.get_statements("P577")[0], "http://films.example.com/x")
        saved = await store.save(entity)
        return saved, entity

    saved, entity = run_with_store(handler, save)

    assert saved is False
    assert len(posted) == 2
    director_form = next(f for f in posted if f["statement"] == ["Q1$director"])
    assert director_form["action"] == ["wbsetreference"]
    assert director_form["token"] == ["token+\\"]
    assert json.loads(director_form["snaks"][0])["P854"][0]["datavalue"]["value"] == "http://films.example.com/x"

    assert [c.statement_id for c in entity.pending_citations] == ["Q1$date"], "Failed citations stay pending"
    assert "http://films.example.com/x" in entity.get_statements("P57")[0].reference_urls


def test_save_nothing_pending():
    def handler(request):
        raise AssertionError("No request expected")

    async def save(store):
        return await store.save(entity_from_wikibase(FILM_DOCUMENT))

    assert run_with_store(handler, save) is True


# ============================================================================
# DryRunEntityStore
# ============================================================================

def test_dry_run_store():
    async def run(store):
        dry_run = DryRunEntityStore(store)
        entity = await dry_run.load("Q1")
        entity.stage_citation(entity.get_statements("P57")[0], "http://films.example.com/x")
        saved = await dry_run.save(entity)
        return dry_run, entity, saved

    dry_run, entity, saved = run_with_store(wikibase_handler([]), run)

    assert saved is True
    assert entity.pending_citations == []
    assert [c.source_url for c in dry_run.saved] == ["http://films.example.com/x"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
