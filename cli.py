#!/usr/bin/env python3
"""
Identity Relations CLI - inspect and edit relation tables from the shell.

Usage:
    identity-relations init-db                                   # Load schema.sql
    identity-relations check                                     # Verify the database is reachable
    identity-relations link organization_user_relations org1,user1 org1,user2
    identity-relations unlink organization_user_relations organizationId=org1 userId=user1
    identity-relations list organization_user_relations users organizationId=org1
    identity-relations --debug list ...                          # Log generated SQL
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import asyncpg
from pydantic import ValidationError

from config import DatabaseConfig
from container import RepositoryContainer
from database import DatabaseConnection, DatabaseMigration, close_database, init_database
from models import DESCRIPTORS
from relations import RelationError, affected_rows
from utils.error_messages import describe_relation_error, is_client_error

logger = logging.getLogger(__name__)

SCHEMA_FILE = Path(__file__).parent / "schema.sql"

EXIT_SYSTEM_ERROR = 1
EXIT_CLIENT_ERROR = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Identity Relations - manage relation tables of the identity database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    identity-relations init-db
    identity-relations link organization_user_relations org1,user1
    identity-relations unlink organization_user_relations organizationId=org1
    identity-relations list organization_role_user_relations organization_roles organizationId=org1 userId=user1
        """
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--env", type=str, default=None, help="Environment mode (overrides APP_ENV)")

    commands = parser.add_subparsers(dest="command", required=True)

    init_db = commands.add_parser("init-db", help="Create tables from schema.sql")
    init_db.add_argument(
        "--schema", type=str, default=None,
        help="Schema file to load (default: schema.sql next to cli.py, required for installed copies)"
    )

    commands.add_parser("check", help="Check that the database is reachable")

    link = commands.add_parser("link", help="Insert relation rows")
    link.add_argument("relation", help="Relation table name")
    link.add_argument("rows", nargs="+", help="Comma-separated ids per row, in the relation's table order")

    unlink = commands.add_parser("unlink", help="Delete relation rows matching ALL criteria")
    unlink.add_argument("relation", help="Relation table name")
    unlink.add_argument("criteria", nargs="+", help="camelCase id criteria, e.g. userId=abc")

    list_cmd = commands.add_parser("list", help="List rows of one table connected through a relation")
    list_cmd.add_argument("relation", help="Relation table name")
    list_cmd.add_argument("target", help="Table to list rows from, e.g. users")
    list_cmd.add_argument("criteria", nargs="*", help="camelCase id criteria, e.g. organizationId=abc")

    return parser.parse_args(argv)


def parse_rows(rows: List[str]) -> List[List[str]]:
    """'org1,user1' → ['org1', 'user1']"""
    return [[part.strip() for part in row.split(",")] for row in rows]


def parse_criteria(pairs: List[str]) -> Dict[str, str]:
    """['userId=abc', 'organizationId=xyz'] → {'userId': 'abc', 'organizationId': 'xyz'}"""
    criteria = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Invalid criterion '{pair}', expected key=value")
        criteria[key.strip()] = value.strip()
    return criteria


def get_relation(repos: RepositoryContainer, name: str):
    relations = repos.relations.by_table()
    if name not in relations:
        raise argparse.ArgumentTypeError(
            f"Unknown relation '{name}'. Known relations: {', '.join(sorted(relations))}"
        )
    return relations[name]


def resolve_schema_file(schema: Optional[str]) -> str:
    """Explicit --schema wins; otherwise the schema.sql shipped beside this module"""
    path = Path(schema) if schema else SCHEMA_FILE
    if not path.is_file():
        raise argparse.ArgumentTypeError(
            f"Schema file not found: {path}. Pass --schema /path/to/schema.sql"
        )
    return str(path)


async def run_command(args: argparse.Namespace, db: DatabaseConnection) -> str:
    """Execute one parsed command and return the text to print"""
    if args.command == "init-db":
        await DatabaseMigration(db).initialize_database(resolve_schema_file(args.schema))
        return "Schema ready"

    if args.command == "check":
        if not await db.check_connection():
            raise ConnectionError("Database connection check failed")
        return "Database connection OK"

    repos = RepositoryContainer(db)
    relation = get_relation(repos, args.relation)

    if args.command == "link":
        status = await relation.insert(*parse_rows(args.rows))
        return f"Inserted {affected_rows(status)} row(s) into {relation.relation_table}"

    if args.command == "unlink":
        status = await relation.delete(parse_criteria(args.criteria))
        return f"Deleted {affected_rows(status)} row(s) from {relation.relation_table}"

    if args.command == "list":
        target = DESCRIPTORS.get(args.target)
        if target is None:
            raise argparse.ArgumentTypeError(
                f"Unknown table '{args.target}'. Known tables: {', '.join(sorted(DESCRIPTORS))}"
            )
        entries = await relation.get_entries(target, parse_criteria(args.criteria))
        return json.dumps([entry.model_dump(mode="json") for entry in entries], indent=2)

    raise argparse.ArgumentTypeError(f"Unknown command '{args.command}'")


async def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    try:
        db = await init_database(DatabaseConfig.from_environment(args.env))
        print(await run_command(args, db))
        return 0
    except argparse.ArgumentTypeError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_CLIENT_ERROR
    except (RelationError, ValidationError, asyncpg.PostgresError) as e:
        logger.debug("Relation command failed", exc_info=True)
        print(f"❌ {describe_relation_error(e)}", file=sys.stderr)
        return EXIT_CLIENT_ERROR if is_client_error(e) else EXIT_SYSTEM_ERROR
    except ValueError as e:
        # Configuration rejected (bad DB_PORT, test mode on a non-test database)
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_CLIENT_ERROR
    except (OSError, asyncio.TimeoutError, asyncpg.InterfaceError) as e:
        logger.debug("Database unavailable", exc_info=True)
        print(f"❌ Database unavailable: {e}", file=sys.stderr)
        return EXIT_SYSTEM_ERROR
    finally:
        await close_database()


def cli_entry():
    """Entry point for console script - wraps async main()"""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli_entry()
