"""Matcher for attributes whose values reference other entities."""

from typing import Callable, List, Optional, Sequence

from refminer.models import EntityReference, Statement, normalize_label
from .base_matcher import BaseMatcher, MatcherRule

LabelComparator = Callable[[str, str], bool]


def exact_label_match(record_value: str, label: str) -> bool:
    """Case-insensitive, whitespace-insensitive equality."""
    return normalize_label(record_value) == normalize_label(label)


class ReferenceMatcher(BaseMatcher):
    """
    Compare record text against the labels of referenced entities.

    A statement pointing at Q30 with labels ("United States of America",
    "USA") is corroborated by a record value "usa". The comparison can be
    swapped for a fuzzier one through label_comparator.
    """

    kind = "reference"

    def __init__(self, rules: Sequence[MatcherRule], label_comparator: Optional[LabelComparator] = None):
        super().__init__(rules)
        self.label_comparator = label_comparator or exact_label_match

    def statement_matches(self, rule: MatcherRule, statement: Statement, values: List[str]) -> bool:
        if not isinstance(statement.value, EntityReference):
            return False
        return any(
            self.label_comparator(value, label)
            for value in values
            for label in statement.value.labels
        )
