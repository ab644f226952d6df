"""
Relation queries for junction tables

Manages many-to-many relation tables (e.g. organization_user_relations)
without hand-written SQL per relation.
"""

from .descriptors import TableDescriptor
from .errors import RelationConfigError, RelationCriteriaError, RelationError, RelationShapeError
from .naming import camel_to_snake, snake_to_camel, snakecase_keys
from .queries import QueryExecutor, RelationQueries
from .sql import affected_rows

__all__ = [
    'TableDescriptor',
    'RelationQueries',
    'QueryExecutor',
    'RelationError',
    'RelationConfigError',
    'RelationShapeError',
    'RelationCriteriaError',
    'camel_to_snake',
    'snake_to_camel',
    'snakecase_keys',
    'affected_rows',
]
