"""
Repository Container - Centralized dependency injection container

Builds one RelationQueries per relation table and the repositories that
use them. Constructed once per process, after the database is connected.
"""

from models import OrganizationRoles, OrganizationScopes, Organizations, Users
from relations import RelationQueries
from repositories import (
    OrganizationRolesRepository,
    OrganizationScopesRepository,
    OrganizationsRepository,
    UsersRepository,
)


class RelationContainer:
    """Relation queries keyed by attribute and by relation table name"""

    def __init__(self, db):
        self.organization_users = RelationQueries(
            db, 'organization_user_relations', Organizations, Users
        )
        self.organization_role_scopes = RelationQueries(
            db, 'organization_role_scope_relations', OrganizationRoles, OrganizationScopes
        )
        self.organization_role_users = RelationQueries(
            db, 'organization_role_user_relations', Organizations, OrganizationRoles, Users
        )

    def by_table(self) -> dict:
        """Map relation table name → RelationQueries"""
        return {
            relation.relation_table: relation
            for relation in (
                self.organization_users,
                self.organization_role_scopes,
                self.organization_role_users,
            )
        }


class RepositoryContainer:
    """
    Container for repository instances with attribute access.
    """

    def __init__(self, db):
        self.relations = RelationContainer(db)

        self.users = UsersRepository(db)
        self.organization_scopes = OrganizationScopesRepository(db)
        self.organization_roles = OrganizationRolesRepository(
            db, self.relations.organization_role_scopes
        )
        self.organizations = OrganizationsRepository(
            db,
            self.relations.organization_users,
            self.relations.organization_role_users,
        )
