"""
Relation Queries

Generic query object for relation (junction) tables that connect two or more
entity tables by their ids.

Given tables `users` and `organizations` and a relation table
`organization_user_relations` with columns `organization_id` and `user_id`:

    relations = RelationQueries(db, "organization_user_relations", Organizations, Users)

    # Insert one or many relations; ids follow the descriptor order
    await relations.insert(["org-1", "user-1"])
    await relations.insert(["org-1", "user-1"], ["org-1", "user-2"])

    # All users connected to org-1
    users = await relations.get_entries(Users, {"organizationId": "org-1"})

    # Remove a single relation
    await relations.delete({"organizationId": "org-1", "userId": "user-1"})

All id values are passed as asyncpg positional parameters. Table and column
names come from the descriptors only and are quoted as identifiers.
"""

import logging
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel

from .descriptors import TableDescriptor
from .errors import RelationConfigError, RelationCriteriaError, RelationShapeError
from .naming import snakecase_keys
from .sql import Params, qualified, quote_identifier

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class QueryExecutor(Protocol):
    """
    What RelationQueries needs from a connection.

    Satisfied by database.DatabaseConnection, asyncpg.Pool and
    asyncpg.Connection (including one inside a transaction block).
    """

    async def execute(self, query: str, *args: Any) -> str: ...

    async def fetch(self, query: str, *args: Any) -> list: ...


class RelationQueries:
    """Insert, delete and look up rows of one relation table."""

    def __init__(self, pool: QueryExecutor, relation_table: str, *schemas: TableDescriptor):
        """
        Args:
            pool: Connection used for every statement. Owned by the caller,
                never opened or closed here.
            relation_table: Name of the relation table
            *schemas: Descriptors of the connected tables (at least two). Their
                order is the order of ids expected by insert().
        """
        if len(schemas) < 2:
            raise RelationConfigError(
                f"Relation '{relation_table}' needs at least 2 tables, got {len(schemas)}"
            )

        columns = [schema.id_column for schema in schemas]
        if len(set(columns)) != len(columns):
            raise RelationConfigError(
                f"Relation '{relation_table}' has duplicate id columns: {columns}"
            )

        self.pool = pool
        self.relation_table = relation_table
        self.schemas: Tuple[TableDescriptor, ...] = tuple(schemas)

    @property
    def table(self) -> str:
        """Quoted relation table identifier"""
        return quote_identifier(self.relation_table)

    async def insert(self, *data: Sequence[str]) -> Optional[str]:
        """
        Insert new entries into the relation table in a single statement.

        Each entry must hold exactly one id per descriptor, in descriptor order.

        Example:
            await relations.insert(["org-1", "user-1"], ["org-1", "user-2"])

        Returns:
            asyncpg status tag (e.g. "INSERT 0 2"), or None when `data` is
            empty; an empty batch is a no-op and never reaches the database.

        Raises:
            RelationShapeError: An entry has the wrong number of ids
        """
        if not data:
            logger.debug(f"Skipping empty insert into {self.relation_table}")
            return None

        expected = len(self.schemas)
        for index, entry in enumerate(data):
            if isinstance(entry, (str, bytes)) or len(entry) != expected:
                raise RelationShapeError(
                    f"Entry {index} for '{self.relation_table}' must contain {expected} ids "
                    f"({', '.join(schema.id_column for schema in self.schemas)}), got {entry!r}"
                )

        params = Params()
        columns = ", ".join(quote_identifier(schema.id_column) for schema in self.schemas)
        rows = ", ".join(
            "(" + ", ".join(params.add(value) for value in entry) + ")"
            for entry in data
        )
        query = f"INSERT INTO {self.table} ({columns}) VALUES {rows}"

        logger.debug(f"Inserting {len(data)} row(s) into {self.relation_table}")
        return await self.pool.execute(query, *params.values)

    async def delete(self, where: Mapping[str, Any]) -> str:
        """
        Delete the relations matching ALL given ids.

        Keys are camelCase id fields ending with `Id`, e.g.
        {"organizationId": "org-1", "userId": "user-1"}. Any subset of the
        relation's id columns may be given.

        Returns:
            asyncpg status tag (e.g. "DELETE 1")

        Raises:
            RelationCriteriaError: `where` is empty. Deleting every relation
                is never what a caller of this method wants.
        """
        if not where:
            raise RelationCriteriaError(
                f"Refusing to delete from '{self.relation_table}' without criteria"
            )

        params = Params()
        conditions = self._conditions(snakecase_keys(where), params)
        query = f"DELETE FROM {self.table} WHERE {conditions}"

        logger.debug(f"Deleting from {self.relation_table} by {list(where)}")
        return await self.pool.execute(query, *params.values)

    async def get_entries(
        self,
        for_schema: TableDescriptor,
        where: Optional[Mapping[str, Any]] = None,
    ) -> List[Any]:
        """
        Get all rows of `for_schema`'s table connected to the given ids.

        Args:
            for_schema: Descriptor of the table to return rows from. Must be
                one of this relation's descriptors.
            where: Ids of the *other* tables to filter by, camelCase keys
                ending with `Id`. Without criteria every row of the target table
                that takes part in the relation is returned.

        Returns:
            Rows decoded by `for_schema.guard`, in the order the database
            returns them. Empty list when nothing matches.

        Raises:
            RelationConfigError: `for_schema` is not part of this relation
            RelationCriteriaError: `where` filters by `for_schema`'s own id
            pydantic.ValidationError: A row does not match the guard model
        """
        if for_schema not in self.schemas:
            raise RelationConfigError(
                f"Table '{for_schema.table}' is not part of relation '{self.relation_table}'"
            )

        criteria = snakecase_keys(where or {})
        if for_schema.id_column in criteria:
            raise RelationCriteriaError(
                f"Cannot filter '{for_schema.table}' entries by their own id "
                f"'{for_schema.id_key}'"
            )

        params = Params()
        target = quote_identifier(for_schema.table)
        query = (
            f"SELECT {target}.* FROM {self.table} "
            f"JOIN {target} ON {qualified(self.relation_table, for_schema.id_column)} "
            f"= {qualified(for_schema.table, 'id')}"
        )
        if criteria:
            query += f" WHERE {self._conditions(criteria, params, qualify=True)}"

        logger.debug(f"Fetching {for_schema.table} through {self.relation_table} by {list(criteria)}")
        rows = await self.pool.fetch(query, *params.values)
        return self._decode(for_schema.guard, rows)

    def _conditions(self, criteria: Mapping[str, Any], params: Params, qualify: bool = False) -> str:
        """AND-join one equality predicate per (column, value) pair"""
        predicates = []
        for column, value in criteria.items():
            ref = qualified(self.relation_table, column) if qualify else quote_identifier(column)
            predicates.append(f"{ref} = {params.add(value)}")
        return " AND ".join(predicates)

    @staticmethod
    def _decode(guard: Type[ModelT], rows: Sequence[Any]) -> List[ModelT]:
        return [guard.model_validate(dict(row)) for row in rows]

    def key_for(self, schema: TableDescriptor) -> str:
        """camelCase criteria key of a descriptor in this relation"""
        if schema not in self.schemas:
            raise RelationConfigError(
                f"Table '{schema.table}' is not part of relation '{self.relation_table}'"
            )
        return schema.id_key

    def __repr__(self) -> str:
        tables = ", ".join(schema.table for schema in self.schemas)
        return f"RelationQueries({self.relation_table!r}: {tables})"

