"""Matcher for free-text and multi-valued attributes with alias tables."""

from typing import List

from refminer.models import EntityReference, Statement, TextValue, normalize_label
from .alias_patterns import alias_matches
from .base_matcher import BaseMatcher, MatcherRule


class TextMatcher(BaseMatcher):
    """
    Match record values literally or through the rule's alias table.

    Each statement of a multi-valued attribute (several genres, say) is
    tested on its own. The alias table is looked up by the statement value's
    key: the entity id for references, the text for text values.
    """

    kind = "text"

    def statement_matches(self, rule: MatcherRule, statement: Statement, values: List[str]) -> bool:
        value = statement.value
        if isinstance(value, TextValue):
            literals = [value.text]
        elif isinstance(value, EntityReference):
            literals = list(value.labels)
        else:
            return False

        wanted = {normalize_label(text) for text in literals}
        pattern = rule.aliases.get(value.key)
        for record_value in values:
            if normalize_label(record_value) in wanted:
                return True
            if pattern is not None and alias_matches(pattern, record_value):
                return True
        return False
