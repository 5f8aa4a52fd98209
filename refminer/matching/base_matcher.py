"""Base class for attribute matchers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Mapping, Optional, Pattern, Sequence, Tuple, Union

from refminer.models import Entity, MicroRecord, Statement


@dataclass(frozen=True)
class MatcherRule:
    """
    Which record fields can corroborate which attribute.

    Attributes:
        attribute_key: Entity attribute (e.g., "P57")
        field_names: Record fields that may corroborate it; any one suffices
        aliases: Optional value key -> compiled alias pattern
    """

    attribute_key: str
    field_names: Tuple[str, ...]
    aliases: Mapping[str, Pattern] = field(default_factory=dict)


def rules_from_mapping(
    mapping: Mapping[str, Union[str, Sequence[str]]],
    alias_tables: Mapping[str, Mapping[str, Pattern]] = None
) -> List[MatcherRule]:
    """
    Build rules from {attribute: field or [fields]}.

    Args:
        mapping: Attribute key -> record field name(s)
        alias_tables: Attribute key -> alias table, where present

    Returns:
        List of MatcherRules in mapping order
    """
    alias_tables = alias_tables or {}
    rules = []
    for attribute_key, fields in mapping.items():
        names = (fields,) if isinstance(fields, str) else tuple(fields)
        rules.append(MatcherRule(
            attribute_key=attribute_key,
            field_names=names,
            aliases=alias_tables.get(attribute_key, {}),
        ))
    return rules


class BaseMatcher(ABC):
    """
    Abstract base class for the attribute matchers.

    The set of matchers is closed: ReferenceMatcher, DateMatcher and
    TextMatcher. Each decides, per statement, whether the values a record
    carries for the rule's fields corroborate the statement's value.
    Matching only stages citations on the entity; saving happens later.
    """

    kind: str = "base"

    def __init__(self, rules: Sequence[MatcherRule]):
        self.rules = tuple(rules)

    def add_references(
        self,
        record: MicroRecord,
        entity: Entity,
        source_link: str,
        retrieved_at: Optional[datetime] = None
    ) -> int:
        """
        Stage a citation on every statement the record corroborates.

        A record lacking the rule's fields is simply no match.

        Args:
            record: Record extracted from the page at source_link
            entity: Entity being referenced
            source_link: URL the record came from
            retrieved_at: When source_link was fetched

        Returns:
            Number of citations newly staged
        """
        added = 0
        for rule in self.rules:
            statements = entity.get_statements(rule.attribute_key)
            if not statements:
                continue

            values = [v for name in rule.field_names for v in record.get(name)]
            if not values:
                continue

            for statement in statements:
                if not self.statement_matches(rule, statement, values):
                    continue
                if entity.stage_citation(statement, source_link, retrieved_at):
                    added += 1
        return added

    @abstractmethod
    def statement_matches(self, rule: MatcherRule, statement: Statement, values: List[str]) -> bool:
        """
        Decide whether any record value corroborates a statement.

        Args:
            rule: Rule being applied
            statement: Existing statement on the entity
            values: Record values for the rule's fields

        Returns:
            True if a citation should be staged
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(attributes={[r.attribute_key for r in self.rules]})"
