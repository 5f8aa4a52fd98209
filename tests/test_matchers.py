"""Test type classification and the attribute matchers."""

from datetime import datetime

import pytest

from refminer.matching import (
    GENRE_KEY,
    DateMatcher,
    ReferenceMatcher,
    SemanticType,
    TextMatcher,
    build_alias_table,
    build_matcher_registry,
    build_type_classifier,
    dates_match,
    parse_date,
    rules_from_mapping,
)
from refminer.models import (
    DateValue,
    Entity,
    EntityReference,
    MicroRecord,
    Statement,
    TextValue,
    PRECISION_DAY,
    PRECISION_DECADE,
    PRECISION_MONTH,
    PRECISION_YEAR,
)

SOURCE = "http://films.example.com/some-film"


def make_entity(entity_id="Q1", **statements):
    """Build an entity from attribute -> list of values."""
    entity = Entity(entity_id=entity_id)
    for attribute_key, values in statements.items():
        entity.statements[attribute_key] = [
            Statement(statement_id=f"{entity_id}${attribute_key}-{i}", attribute_key=attribute_key, value=v)
            for i, v in enumerate(values)
        ]
    return entity


def record(type_name="Movie", **fields):
    return MicroRecord(types=[f"http://schema.org/{type_name}"], properties=fields)


# ============================================================================
# Type classifier
# ============================================================================

@pytest.mark.parametrize("instance_ids,expected", [
    (["Q5"], {SemanticType.PERSON}),
    (["Q11424"], {SemanticType.MOVIE}),
    (["Q11424", "Q5"], {SemanticType.MOVIE, SemanticType.PERSON}),
    (["Q515"], set()),
    ([], set()),
])
def test_classify(instance_ids, expected):
    entity = make_entity(P31=[EntityReference(q) for q in instance_ids])

    assert build_type_classifier().classify(entity) == frozenset(expected)


def test_classify_ignores_other_attributes():
    entity = make_entity(P279=[EntityReference("Q5")])

    assert build_type_classifier().classify(entity) == frozenset()


# ============================================================================
# Reference matcher
# ============================================================================

@pytest.fixture
def reference_matcher():
    return ReferenceMatcher(rules_from_mapping({
        "P57": "director",
        "P272": ("creator", "productionCompany"),
    }))


def test_reference_label_match(reference_matcher):
    entity = make_entity(P57=[EntityReference("Q100", ("Jane Director", "J. Director"))])

    added = reference_matcher.add_references(record(director=["jane director"]), entity, SOURCE)

    assert added == 1
    citation = entity.pending_citations[0]
    assert citation.statement_id == "Q1$P57-0"
    assert citation.attribute_key == "P57"
    assert citation.source_url == SOURCE


def test_reference_alternate_field(reference_matcher):
    entity = make_entity(P272=[EntityReference("Q200", ("Acme Pictures",))])

    added = reference_matcher.add_references(record(productionCompany=["Acme Pictures"]), entity, SOURCE)

    assert added == 1


def test_reference_no_match(reference_matcher):
    entity = make_entity(P57=[EntityReference("Q100", ("Jane Director",))])

    assert reference_matcher.add_references(record(director=["John Doe"]), entity, SOURCE) == 0
    assert reference_matcher.add_references(record(actor=["Jane Director"]), entity, SOURCE) == 0, \
        "A record without the rule's fields must not match"
    assert entity.pending_citations == []


def test_reference_already_cited(reference_matcher):
    entity = make_entity(P57=[EntityReference("Q100", ("Jane Director",))])
    entity.statements["P57"][0].reference_urls.append(SOURCE)

    assert reference_matcher.add_references(record(director=["Jane Director"]), entity, SOURCE) == 0


def test_reference_repeat_record_stages_once(reference_matcher):
    entity = make_entity(P57=[EntityReference("Q100", ("Jane Director",))])
    rec = record(director=["Jane Director"])

    assert reference_matcher.add_references(rec, entity, SOURCE) == 1
    assert reference_matcher.add_references(rec, entity, SOURCE) == 0
    assert len(entity.pending_citations) == 1


def test_retrieved_at_passed_to_citation(reference_matcher):
    entity = make_entity(P57=[EntityReference("Q100", ("Jane Director",))])
    fetched_at = datetime(2020, 1, 2)

    reference_matcher.add_references(record(director=["Jane Director"]), entity, SOURCE, fetched_at)

    assert entity.pending_citations[0].retrieved_at == fetched_at


def test_reference_custom_comparator():
    matcher = ReferenceMatcher(
        rules_from_mapping({"P57": "director"}),
        label_comparator=lambda value, label: label.lower() in value.lower(),
    )
    entity = make_entity(P57=[EntityReference("Q100", ("Jane Director",))])

    assert matcher.add_references(record(director=["Directed by Jane Director"]), entity, SOURCE) == 1


# ============================================================================
# Date matcher
# ============================================================================

@pytest.mark.parametrize("text,expected", [
    ("1946-06-14", DateValue(1946, 6, 14, PRECISION_DAY)),
    ("14 June 1946", DateValue(1946, 6, 14, PRECISION_DAY)),
    ("June 14, 1946", DateValue(1946, 6, 14, PRECISION_DAY)),
    ("1946-06-14T00:00:00Z", DateValue(1946, 6, 14, PRECISION_DAY)),
    ("June 1946", DateValue(1946, 6, 0, PRECISION_MONTH)),
    ("1946", DateValue(1946, 0, 0, PRECISION_YEAR)),
    ("sometime in the forties", None),
    ("", None),
])
def test_parse_date(text, expected):
    assert parse_date(text) == expected


def test_dates_match_precision():
    day = DateValue(1946, 6, 14, PRECISION_DAY)
    year = DateValue(1946, 0, 0, PRECISION_YEAR)

    assert dates_match(day, DateValue(1946, 6, 14, PRECISION_DAY))
    assert dates_match(day, year), "A more precise record corroborates a coarser value"
    assert not dates_match(year, day), "A less precise record never corroborates"
    assert not dates_match(DateValue(1946, 6, 15, PRECISION_DAY), day)


@pytest.mark.parametrize("statement_date,record_text,expected", [
    (DateValue(1946, 6, 14, PRECISION_DAY), "14 June 1946", 1),
    (DateValue(1946, 6, 14, PRECISION_DAY), "1946", 0),
    (DateValue(1946, 0, 0, PRECISION_YEAR), "1946", 1),
    (DateValue(1940, 0, 0, PRECISION_DECADE), "1946", 1),
    (DateValue(1950, 0, 0, PRECISION_DECADE), "1946", 0),
    (DateValue(1946, 6, 14, PRECISION_DAY), "not a date", 0),
])
def test_date_matcher(statement_date, record_text, expected):
    matcher = DateMatcher(rules_from_mapping({"P569": "birthDate"}))
    entity = make_entity(P569=[statement_date])

    added = matcher.add_references(record("Person", birthDate=[record_text]), entity, SOURCE)

    assert added == expected


def test_date_matcher_ignores_non_dates():
    matcher = DateMatcher(rules_from_mapping({"P569": "birthDate"}))
    entity = make_entity(P569=[TextValue("1946")])

    assert matcher.add_references(record("Person", birthDate=["1946"]), entity, SOURCE) == 0


# ============================================================================
# Text matcher
# ============================================================================

GENRES = {
    "Q471839": "science fiction film",
    "Q200092": "horror film",
    "Q130232": "drama film",
}


@pytest.fixture
def genre_entity():
    return make_entity(**{GENRE_KEY: [
        EntityReference(q, (label,)) for q, label in GENRES.items()
    ]})


@pytest.fixture
def text_matcher():
    return TextMatcher(rules_from_mapping({GENRE_KEY: "genre"}, {GENRE_KEY: build_alias_table(GENRES)}))


def test_text_multi_valued(text_matcher, genre_entity):
    added = text_matcher.add_references(record(genre=["Horror", "Drama", "Western"]), genre_entity, SOURCE)

    assert added == 2
    cited = {c.statement_id for c in genre_entity.pending_citations}
    assert cited == {"Q1$P136-1", "Q1$P136-2"}


def test_text_alias_match(text_matcher, genre_entity):
    added = text_matcher.add_references(record(genre=["Sci-Fi"]), genre_entity, SOURCE)

    assert added == 1
    assert genre_entity.pending_citations[0].statement_id == "Q1$P136-0"


def test_text_literal_match_without_aliases(genre_entity):
    matcher = TextMatcher(rules_from_mapping({GENRE_KEY: "genre"}))

    assert matcher.add_references(record(genre=["Horror Film"]), genre_entity, SOURCE) == 1
    assert matcher.add_references(record(genre=["Sci-Fi"]), genre_entity, SOURCE) == 0


def test_text_value_literal():
    matcher = TextMatcher(rules_from_mapping({"P1476": "name"}))
    entity = make_entity(P1476=[TextValue("Blade Runner", "en")])

    assert matcher.add_references(record(name=["blade  runner"]), entity, SOURCE) == 1


# ============================================================================
# Registry
# ============================================================================

def test_registry_layout():
    registry = build_matcher_registry()

    assert [m.kind for m in registry[SemanticType.PERSON]] == ["reference", "date"]
    assert [m.kind for m in registry[SemanticType.MOVIE]] == ["reference", "text", "date"]
    with pytest.raises(TypeError):
        registry[SemanticType.PERSON] = ()


def test_registry_movie_end_to_end():
    registry = build_matcher_registry(genre_aliases=build_alias_table(GENRES))
    entity = make_entity(
        P57=[EntityReference("Q100", ("Jane Director",))],
        P136=[EntityReference("Q471839", ("science fiction film",))],
        P577=[DateValue(1982, 6, 25, PRECISION_DAY)],
    )
    rec = record(director=["Jane Director"], genre=["science fiction"], datePublished=["1982-06-25"])

    added = sum(m.add_references(rec, entity, SOURCE) for m in registry[SemanticType.MOVIE])

    assert added == 3
    assert {c.attribute_key for c in entity.pending_citations} == {"P57", "P136", "P577"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
