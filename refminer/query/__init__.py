"""Entity selection through the query service."""

from .sparql import SparqlQueryRunner, build_query_part, entity_id_from_uri

__all__ = [
    "SparqlQueryRunner",
    "build_query_part",
    "entity_id_from_uri",
]
