"""Type classification and attribute matching."""

from .type_classifier import SemanticType, TypeClassifier
from .base_matcher import BaseMatcher, MatcherRule, rules_from_mapping
from .reference_matcher import ReferenceMatcher, exact_label_match
from .date_matcher import DateMatcher, parse_date, dates_match
from .text_matcher import TextMatcher
from .alias_patterns import (
    build_alias_pattern,
    compile_alias_pattern,
    build_alias_table,
    alias_matches,
    load_vocabulary,
)
from .registry import (
    MatcherRegistry,
    build_matcher_registry,
    build_type_classifier,
    INSTANCE_OF_KEY,
    GENRE_KEY,
    GENRE_VOCABULARY_CLASS,
)

__all__ = [
    "SemanticType",
    "TypeClassifier",
    "BaseMatcher",
    "MatcherRule",
    "rules_from_mapping",
    "ReferenceMatcher",
    "exact_label_match",
    "DateMatcher",
    "parse_date",
    "dates_match",
    "TextMatcher",
    "build_alias_pattern",
    "compile_alias_pattern",
    "build_alias_table",
    "alias_matches",
    "load_vocabulary",
    "MatcherRegistry",
    "build_matcher_registry",
    "build_type_classifier",
    "INSTANCE_OF_KEY",
    "GENRE_KEY",
    "GENRE_VOCABULARY_CLASS",
]
