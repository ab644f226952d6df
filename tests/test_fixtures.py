"""
Test fixtures and utilities for creating sample data
"""

from container import RepositoryContainer
from models import OrganizationCreate, OrganizationRoleCreate, OrganizationScopeCreate, UserCreate


class SampleDataFactory:
    """Creates entities through the repositories and returns their ids"""

    def __init__(self, repos: RepositoryContainer):
        self.repos = repos
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def create_user(self, username: str = None) -> str:
        n = self._next()
        user = await self.repos.users.create(UserCreate(
            username=username or f"user{n}",
            primary_email=f"user{n}@example.com",
            name=f"Test User {n}",
        ))
        return user.id

    async def create_organization(self, name: str = None) -> str:
        organization = await self.repos.organizations.create(
            OrganizationCreate(name=name or f"Organization {self._next()}")
        )
        return organization.id

    async def create_role(self, name: str = None) -> str:
        role = await self.repos.organization_roles.create(
            OrganizationRoleCreate(name=name or f"role-{self._next()}")
        )
        return role.id

    async def create_scope(self, name: str = None) -> str:
        scope = await self.repos.organization_scopes.create(
            OrganizationScopeCreate(name=name or f"scope:{self._next()}")
        )
        return scope.id
