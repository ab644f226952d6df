"""
Table Descriptors

Static metadata for one entity table that takes part in a relation.
The generated descriptors live in models.py next to the row models.
"""

from dataclasses import dataclass
from typing import Type

from pydantic import BaseModel

from .naming import snake_to_camel


@dataclass(frozen=True)
class TableDescriptor:
    """
    Describes an entity table for RelationQueries.

    Attributes:
        table: Plural storage table name, e.g. "users"
        table_singular: Singular name used as the relation column prefix, e.g. "user"
        guard: Pydantic model that decodes rows of this table
    """

    table: str
    table_singular: str
    guard: Type[BaseModel]

    @property
    def id_column(self) -> str:
        """Relation table column holding this entity's id, e.g. "user_id" """
        return f"{self.table_singular}_id"

    @property
    def id_key(self) -> str:
        """Caller-side (camelCase) key for this entity's id, e.g. "userId" """
        return snake_to_camel(self.id_column)

    def __repr__(self) -> str:
        return f"TableDescriptor({self.table!r})"
