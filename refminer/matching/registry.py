"""
Static classification and matcher tables.

Everything here is built once at start-up by build_matcher_registry() and
passed explicitly to the pipeline. The returned mappings are read-only.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Pattern, Sequence, Tuple, Union

from .base_matcher import BaseMatcher, rules_from_mapping
from .date_matcher import DateMatcher
from .reference_matcher import ReferenceMatcher, LabelComparator
from .text_matcher import TextMatcher
from .type_classifier import SemanticType, TypeClassifier

INSTANCE_OF_KEY = "P31"
GENRE_KEY = "P136"
# Class of the controlled genre vocabulary (film genre)
GENRE_VOCABULARY_CLASS = "Q201658"

INSTANCE_TYPE_MAP: Mapping[str, SemanticType] = MappingProxyType({
    "Q5": SemanticType.PERSON,      # human
    "Q11424": SemanticType.MOVIE,   # film
})

FieldSpec = Union[str, Sequence[str]]

PERSON_REFERENCE_FIELDS: Dict[str, FieldSpec] = {
    "P7": "sibling",        # brother
    "P9": "sibling",        # sister
    "P19": "birthPlace",
    "P20": "deathPlace",
    "P21": "gender",
    "P22": "parent",        # father
    "P25": "parent",        # mother
    "P26": "spouse",
    "P40": "children",
    "P27": "nationality",
    "P734": "familyName",
    "P735": "givenName",
}

PERSON_DATE_FIELDS: Dict[str, FieldSpec] = {
    "P569": "birthDate",
    "P570": "deathDate",
}

MOVIE_REFERENCE_FIELDS: Dict[str, FieldSpec] = {
    # Person
    "P57": "director",
    "P161": "actor",
    "P162": "producer",
    "P1040": "editor",
    "P58": "author",
    # Organization
    "P272": ("creator", "productionCompany"),
    # Content
    "P364": "inLanguage",
    "P674": "character",
    "P840": "contentLocation",
    # Metadata
    "P166": "award",
    "P1657": "contentRating",
    "P2047": "duration",
    "P2360": "audience",
}

MOVIE_TEXT_FIELDS: Dict[str, FieldSpec] = {
    GENRE_KEY: "genre",
}

MOVIE_DATE_FIELDS: Dict[str, FieldSpec] = {
    "P577": "datePublished",
}

MatcherRegistry = Mapping[SemanticType, Tuple[BaseMatcher, ...]]


def build_type_classifier() -> TypeClassifier:
    return TypeClassifier(INSTANCE_TYPE_MAP, instance_of_key=INSTANCE_OF_KEY)


def build_matcher_registry(
    genre_aliases: Mapping[str, Pattern] = None,
    label_comparator: LabelComparator = None
) -> MatcherRegistry:
    """
    Build the SemanticType -> matchers table.

    Args:
        genre_aliases: Genre id -> compiled alias pattern (see build_alias_table)
        label_comparator: Optional replacement for exact label comparison

    Returns:
        Read-only mapping of SemanticType to its matchers
    """
    alias_tables = {GENRE_KEY: genre_aliases or {}}

    person: List[BaseMatcher] = [
        ReferenceMatcher(rules_from_mapping(PERSON_REFERENCE_FIELDS), label_comparator),
        DateMatcher(rules_from_mapping(PERSON_DATE_FIELDS)),
    ]
    movie: List[BaseMatcher] = [
        ReferenceMatcher(rules_from_mapping(MOVIE_REFERENCE_FIELDS), label_comparator),
        TextMatcher(rules_from_mapping(MOVIE_TEXT_FIELDS, alias_tables)),
        DateMatcher(rules_from_mapping(MOVIE_DATE_FIELDS)),
    ]
    return MappingProxyType({
        SemanticType.PERSON: tuple(person),
        SemanticType.MOVIE: tuple(movie),
    })
