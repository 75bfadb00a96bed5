"""
Command-line interface for Teacha administration.

Commands:
  init-db        Create all database tables
  create-admin   Create a platform administrator (ADMIN without a tenant)
  serve          Run the API server with uvicorn
"""

import argparse
import getpass
import sys
from typing import List, Optional

from teacha.utils.logger import get_logger, setup_logging
from teacha.utils.config import get_settings
from teacha.utils.exceptions import TeachaError


cli_logger = get_logger(__name__)


class TeachaCLI:
    """Command-line interface for Teacha operations."""

    def cmd_init_db(self, args) -> int:
        """Create database tables."""
        from teacha.database.connection import init_db

        init_db()
        print("✅ Database tables created")
        return 0

    def cmd_create_admin(self, args) -> int:
        """Create a platform administrator account."""
        from teacha.auth import hash_password
        from teacha.database.connection import get_db_context
        from teacha.database.models import UserRole
        from teacha.services.user_service import create_user

        password = args.password or getpass.getpass("Password: ")
        if len(password) < 8:
            print("❌ Password must be at least 8 characters")
            return 1

        with get_db_context() as db:
            user = create_user(
                db,
                name=args.name,
                email=args.email,
                password_hash=hash_password(password),
                role=UserRole.ADMIN,
            )
            print(f"✅ Admin created: {user.email} ({user.id})")
        return 0

    def cmd_serve(self, args) -> int:
        """Run the API server."""
        import uvicorn

        settings = get_settings()
        uvicorn.run(
            "teacha.api.main:app",
            host=args.host or settings.api_host,
            port=args.port or settings.api_port,
            reload=args.reload,
        )
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="teacha",
        description="Teacha CLI - database setup and administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  teacha init-db
  teacha create-admin --email admin@teacha.com --name "Platform Admin"
  teacha serve --port 8000 --reload
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")

    admin_parser = subparsers.add_parser("create-admin", help="Create a platform administrator")
    admin_parser.add_argument("--email", required=True, help="Administrator email")
    admin_parser.add_argument("--name", required=True, help="Administrator name")
    admin_parser.add_argument("--password", help="Password (prompted when omitted)")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help="Bind address (default: API_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: API_PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging()

    if not args.command:
        parser.print_help()
        return 1

    cli = TeachaCLI()
    handlers = {
        "init-db": cli.cmd_init_db,
        "create-admin": cli.cmd_create_admin,
        "serve": cli.cmd_serve,
    }

    try:
        return handlers[args.command](args)
    except TeachaError as e:
        cli_logger.error(f"{args.command} failed: {e}")
        print(f"❌ {e.message}")
        return 1


def cli_entry_point():
    """Entry point for console script."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n⏹️  Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli_entry_point()
