"""
Repository layer for database operations
Entity CRUD plus the relation-backed operations of the identity console
"""

from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel

from database import DatabaseConnection
from models import (
    User, UserCreate, Users,
    Organization, OrganizationCreate, Organizations,
    OrganizationRole, OrganizationRoleCreate, OrganizationRoles,
    OrganizationScope, OrganizationScopeCreate, OrganizationScopes,
    generate_standard_id,
)
from relations import RelationQueries, TableDescriptor, affected_rows


class BaseRepository:
    """Base repository with the operations every entity table shares"""

    descriptor: TableDescriptor

    def __init__(self, db: DatabaseConnection):
        self.db = db

    @property
    def model(self) -> Type[BaseModel]:
        return self.descriptor.guard

    def _to_model(self, data: Optional[Dict[str, Any]]):
        """Convert a database record to its Pydantic model"""
        if data is None:
            return None
        return self.model.model_validate(dict(data))

    async def _insert(self, values: Dict[str, Any]):
        """Insert one row (id generated here) and return it decoded"""
        values = {'id': generate_standard_id(), **values}
        columns = ', '.join(values)
        placeholders = ', '.join(f"${i}" for i in range(1, len(values) + 1))
        query = f"""
            INSERT INTO {self.descriptor.table} ({columns})
            VALUES ({placeholders})
            RETURNING *
        """
        row = await self.db.fetchrow(query, *values.values())
        return self._to_model(row)

    async def get_by_id(self, entity_id: str):
        """Get one entity by id, or None"""
        row = await self.db.fetchrow(
            f"SELECT * FROM {self.descriptor.table} WHERE id = $1", entity_id
        )
        return self._to_model(row)

    async def list_all(self, limit: int = 100) -> List[Any]:
        """List entities, newest first"""
        rows = await self.db.fetch(
            f"SELECT * FROM {self.descriptor.table} ORDER BY created_at DESC, id LIMIT $1", limit
        )
        return [self._to_model(row) for row in rows]

    async def delete(self, entity_id: str) -> bool:
        """Delete an entity. Relation rows go with it (ON DELETE CASCADE)."""
        status = await self.db.execute(
            f"DELETE FROM {self.descriptor.table} WHERE id = $1", entity_id
        )
        return affected_rows(status) > 0


class UsersRepository(BaseRepository):
    """Repository for users"""

    descriptor = Users

    async def create(self, user: UserCreate) -> User:
        return await self._insert(user.model_dump())


class OrganizationScopesRepository(BaseRepository):
    """Repository for organization scopes"""

    descriptor = OrganizationScopes

    async def create(self, scope: OrganizationScopeCreate) -> OrganizationScope:
        return await self._insert(scope.model_dump())


class OrganizationRolesRepository(BaseRepository):
    """Repository for organization roles and the scopes they grant"""

    descriptor = OrganizationRoles

    def __init__(self, db: DatabaseConnection, scope_relations: RelationQueries):
        super().__init__(db)
        self.scope_relations = scope_relations

    async def create(self, role: OrganizationRoleCreate) -> OrganizationRole:
        return await self._insert(role.model_dump())

    async def add_scopes(self, role_id: str, scope_ids: Iterable[str]) -> int:
        """Grant scopes to a role. Returns the number of relations created."""
        status = await self.scope_relations.insert(*[(role_id, scope_id) for scope_id in scope_ids])
        return affected_rows(status)

    async def remove_scope(self, role_id: str, scope_id: str) -> bool:
        status = await self.scope_relations.delete(
            {'organizationRoleId': role_id, 'organizationScopeId': scope_id}
        )
        return affected_rows(status) > 0

    async def get_scopes(self, role_id: str) -> List[OrganizationScope]:
        return await self.scope_relations.get_entries(OrganizationScopes, {'organizationRoleId': role_id})

    async def get_roles_with_scope(self, scope_id: str) -> List[OrganizationRole]:
        return await self.scope_relations.get_entries(OrganizationRoles, {'organizationScopeId': scope_id})


class OrganizationsRepository(BaseRepository):
    """
    Repository for organizations, their members, and the roles members
    hold inside each organization.

    Membership lives in organization_user_relations (organization, user);
    member roles live in organization_role_user_relations
    (organization, organization role, user).
    """

    descriptor = Organizations

    def __init__(
        self,
        db: DatabaseConnection,
        user_relations: RelationQueries,
        role_user_relations: RelationQueries,
    ):
        super().__init__(db)
        self.user_relations = user_relations
        self.role_user_relations = role_user_relations

    async def create(self, organization: OrganizationCreate) -> Organization:
        return await self._insert(organization.model_dump())

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    async def add_users(self, organization_id: str, user_ids: Iterable[str]) -> int:
        """
        Add users as members of an organization in one statement.

        Returns:
            Number of membership rows created (0 for an empty list)
        """
        status = await self.user_relations.insert(*[(organization_id, user_id) for user_id in user_ids])
        return affected_rows(status)

    async def remove_user(self, organization_id: str, user_id: str) -> bool:
        """Remove a member. Their roles in the organization are removed with them."""
        status = await self.user_relations.delete({'organizationId': organization_id, 'userId': user_id})
        return affected_rows(status) > 0

    async def get_users(self, organization_id: str) -> List[User]:
        return await self.user_relations.get_entries(Users, {'organizationId': organization_id})

    async def get_user_organizations(self, user_id: str) -> List[Organization]:
        return await self.user_relations.get_entries(Organizations, {'userId': user_id})

    # ------------------------------------------------------------------
    # Member roles
    # ------------------------------------------------------------------

    async def assign_roles(self, organization_id: str, user_id: str, role_ids: Iterable[str]) -> int:
        """
        Give a member roles inside the organization.

        The user must already be a member; otherwise PostgreSQL rejects the
        insert with a foreign key violation.
        """
        status = await self.role_user_relations.insert(
            *[(organization_id, role_id, user_id) for role_id in role_ids]
        )
        return affected_rows(status)

    async def remove_role(self, organization_id: str, user_id: str, role_id: str) -> bool:
        status = await self.role_user_relations.delete({
            'organizationId': organization_id,
            'organizationRoleId': role_id,
            'userId': user_id,
        })
        return affected_rows(status) > 0

    async def get_user_roles(self, organization_id: str, user_id: str) -> List[OrganizationRole]:
        return await self.role_user_relations.get_entries(
            OrganizationRoles, {'organizationId': organization_id, 'userId': user_id}
        )

    async def get_users_with_role(self, organization_id: str, role_id: str) -> List[User]:
        return await self.role_user_relations.get_entries(
            Users, {'organizationId': organization_id, 'organizationRoleId': role_id}
        )
