"""
Relation Errors

Raised locally by RelationQueries before any SQL reaches the database.
Storage failures (asyncpg) and decode failures (pydantic) are never wrapped
in these; they propagate to the caller as raised.
"""


class RelationError(ValueError):
    """Base class for errors detected by the relation layer itself"""


class RelationConfigError(RelationError):
    """The relation was configured with unusable table descriptors"""


class RelationShapeError(RelationError):
    """An insert entry does not carry one id per related table"""


class RelationCriteriaError(RelationError):
    """Filter criteria are empty, ambiguous, or target the wrong column"""
