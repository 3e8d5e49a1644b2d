"""
Command-line interface for the movie catalog.

Provides commands for:
- setup: Create indexes and seed reference data
- status: Show document counts per collection
- promote: Change a user's role
"""

import argparse
import sys
from typing import Optional

from .config import Config
from .database import DatabaseManager
from .errors import CatalogError, ConfigError
from .models import Role
from .ranking import DEFAULT_RANKINGS
from .utils import format_number, print_header, print_status_table

DEFAULT_GENRES = [
    "Comedy",
    "Drama",
    "Western",
    "Fantasy",
    "Thriller",
    "Sci-Fi",
    "Action",
    "Mystery",
    "Crime",
]


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog="movie_catalog",
        description="Movie Catalog - operator tasks for the catalog database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Setup (run first)
  python -m movie_catalog setup

  # Check status
  python -m movie_catalog status

  # Make a user an administrator
  python -m movie_catalog promote alice@example.com
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "setup",
        help="Create indexes and seed rankings and genres",
    )

    subparsers.add_parser(
        "status",
        help="Show current database status",
    )

    promote_parser = subparsers.add_parser(
        "promote",
        help="Set the role of an existing user",
    )
    promote_parser.add_argument(
        "email",
        help="Email address of the user",
    )
    promote_parser.add_argument(
        "--role",
        choices=[r.value for r in Role],
        default=Role.ADMIN.value,
        help="Role to assign (default: ADMIN)",
    )

    return parser


def default_genre_documents() -> list:
    return [
        {"genre_id": str(i), "genre_name": name}
        for i, name in enumerate(DEFAULT_GENRES, start=1)
    ]


def cmd_setup(db: DatabaseManager) -> int:
    """Run setup command."""
    print_header("Movie Catalog Setup")

    db.ping()
    print("Database reachable.")

    indexes = db.ensure_indexes()
    print("\nIndexes:")
    for name in indexes:
        print(f"  {name}")

    seeded = {
        db.RANKINGS: db.seed_collection(
            db.RANKINGS, [r.to_dict() for r in DEFAULT_RANKINGS]
        ),
        db.GENRES: db.seed_collection(
            db.GENRES, default_genre_documents()
        ),
    }

    print("\nReference data:")
    for collection, count in seeded.items():
        if count:
            print(f"  {collection:<20} SEEDED ({count})")
        else:
            print(f"  {collection:<20} EXISTS")

    print("\nSetup complete!")
    return 0


def cmd_status(db: DatabaseManager) -> int:
    """Run status command."""
    print_header("Movie Catalog Status")

    status = db.get_status()
    print_status_table(
        {name.capitalize(): format_number(count) for name, count in status.to_dict().items()},
        title="Database Status",
    )

    if not status.rankings or not status.genres:
        print("Reference data missing. Run 'python -m movie_catalog setup'.")
    return 0


def cmd_promote(db: DatabaseManager, args) -> int:
    """Run promote command."""
    user = db.get_user_by_email(args.email)
    if user is None:
        print(f"No user with email {args.email}")
        return 1

    role = Role(args.role)
    db.update_user(user["user_id"], {"role": role.value})
    print(f"{args.email} is now {role.value}")
    return 0


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 0

    # Load configuration
    try:
        config = Config.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e.message}")
        print("\nMake sure your .env file contains:")
        print("  MONGO_URI=<mongodb connection string>")
        print("  MONGO_DB_NAME=<database name>")
        return 1

    db = DatabaseManager(config)

    # Route to command handler
    try:
        if parsed_args.command == "setup":
            return cmd_setup(db)
        elif parsed_args.command == "status":
            return cmd_status(db)
        elif parsed_args.command == "promote":
            return cmd_promote(db, parsed_args)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled.")
        return 130
    except CatalogError as e:
        print(f"\nError: {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
