"""
Error Message Utilities

Relation queries never wrap or translate errors. Callers (CLI, services)
classify them here: human-readable messages for database constraint
violations, and a client-vs-system split for deciding how to respond.
"""

import re

from pydantic import ValidationError

from relations import RelationConfigError, RelationError

# Human-readable explanations for constraints in schema.sql
CONSTRAINT_MESSAGES = {
    "organization_user_relations_pkey": "The user is already a member of this organization.",
    "organization_role_scope_relations_pkey": "The role already grants this scope.",
    "organization_role_user_relations_pkey": "The member already holds this role in the organization.",
    "organization_role_user_relations_organization_id_user_id_fkey": (
        "Roles can only be assigned to members. Add the user to the organization first."
    ),
    "users_username_key": "A user with this username already exists.",
    "users_primary_email_key": "A user with this email already exists.",
    "organization_roles_name_key": "An organization role with this name already exists.",
    "organization_scopes_name_key": "An organization scope with this name already exists.",
}

_FK_RE = re.compile(r'violates foreign key constraint "(\w+)"')
_UNIQUE_RE = re.compile(r'duplicate key value violates unique constraint "(\w+)"')
_UNDEFINED_COLUMN_RE = re.compile(r'column (?:\w+\.)?"?(\w+)"? does not exist')
_NOT_NULL_RE = re.compile(r'null value in column "(\w+)".* violates not-null constraint')

# Error text patterns that point at bad caller input rather than a broken system
_CLIENT_ERROR_RES = (_FK_RE, _UNIQUE_RE, _NOT_NULL_RE)


def describe_relation_error(error: Exception) -> str:
    """
    Turn an error raised by a relation query into a one-line message.

    Handles:
    - RelationError (configuration, shape and criteria errors raised locally)
    - Unique / foreign key / not-null violations from PostgreSQL
    - Undefined columns (a descriptor does not match the schema)
    - Pydantic validation errors (a stored row does not match its model)

    Returns the original error text when no better message is known.
    """
    if isinstance(error, RelationError):
        return f"Invalid relation request: {error}"

    if isinstance(error, ValidationError):
        return (
            f"Stored {error.title} row does not match the expected shape "
            f"({error.error_count()} error(s)). Check the schema against the models."
        )

    error_str = str(error)

    unique_match = _UNIQUE_RE.search(error_str)
    if unique_match:
        constraint_name = unique_match.group(1)
        explanation = CONSTRAINT_MESSAGES.get(constraint_name)
        if explanation:
            return f"Duplicate entry ({constraint_name}): {explanation}"
        return f"Duplicate entry: A record with this value already exists ({constraint_name})."

    fk_match = _FK_RE.search(error_str)
    if fk_match:
        constraint_name = fk_match.group(1)
        explanation = CONSTRAINT_MESSAGES.get(constraint_name, "The referenced record does not exist.")
        return f"Foreign key violation ({constraint_name}): {explanation}"

    null_match = _NOT_NULL_RE.search(error_str)
    if null_match:
        return f"Required field missing: '{null_match.group(1)}' cannot be null."

    column_match = _UNDEFINED_COLUMN_RE.search(error_str)
    if column_match:
        return (
            f"Unknown relation column '{column_match.group(1)}'. "
            "Check the relation's table descriptors and criteria keys."
        )

    return error_str


def is_client_error(error: Exception) -> bool:
    """
    True when the error was caused by the request (bad ids, duplicates,
    invalid criteria), False when it points at the system (schema drift,
    connectivity, misconfiguration).
    """
    if isinstance(error, RelationError):
        # Misconfigured relations are a deployment problem
        return not isinstance(error, RelationConfigError)

    if isinstance(error, ValidationError):
        return False

    error_str = str(error)
    return any(pattern.search(error_str) for pattern in _CLIENT_ERROR_RES)
