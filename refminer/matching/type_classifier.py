"""Map an entity's instance-of values to semantic type tags."""

import logging
from enum import Enum
from typing import FrozenSet, Mapping

from refminer.models import Entity, EntityReference

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class SemanticType(str, Enum):
    """Closed set of entity kinds with registered matchers."""
    PERSON = "Person"
    MOVIE = "Movie"


class TypeClassifier:
    """
    Static lookup from instance-of identifiers to SemanticTypes.

    Unknown identifiers are ignored. An empty result means the entity has
    nothing to match against and should be skipped.
    """

    def __init__(self, instance_map: Mapping[str, SemanticType], instance_of_key: str = "P31"):
        """
        Args:
            instance_map: Class identifier -> SemanticType (e.g., {"Q5": PERSON})
            instance_of_key: Attribute holding the entity's classes
        """
        self.instance_map = dict(instance_map)
        self.instance_of_key = instance_of_key

    def classify(self, entity: Entity) -> FrozenSet[SemanticType]:
        """
        Classify an entity.

        Args:
            entity: Loaded entity

        Returns:
            Recognized SemanticTypes (possibly empty)
        """
        types = set()
        for value in entity.get_values(self.instance_of_key):
            if isinstance(value, EntityReference) and value.entity_id in self.instance_map:
                types.add(self.instance_map[value.entity_id])
        return frozenset(types)
