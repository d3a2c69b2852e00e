#!/usr/bin/env python3
"""
Vibe Coding Platform - command line entry point

Usage:
    vibecoding serve                 # Run the API + tenant preview server
    vibecoding serve --port 8080     # Custom port
    vibecoding token                 # Mint a local development access token
    vibecoding init-db               # Create catalog tables
"""

import argparse
import asyncio
import sys
import uuid
from datetime import timedelta

from rich.console import Console


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="vibecoding",
        description="Vibe Coding Platform - chat-driven static site generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vibecoding serve                          Start the server on SERVER_HOST:SERVER_PORT
  vibecoding token --email me@example.com   Print a bearer token for local testing
  vibecoding init-db                        Create the project/user tables

Previews:
  Every project is served on http://<project_id>.<PREVIEW_DOMAIN>/
  With PREVIEW_DOMAIN=localhost no DNS setup is needed.
"""
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the server")
    serve.add_argument("--host", type=str, default=None, help="Bind address (default: SERVER_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: SERVER_PORT)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    token = subparsers.add_parser("token", help="Mint a development access token")
    token.add_argument("--user-id", type=str, default=None, help="Subject (default: a new UUID)")
    token.add_argument("--email", type=str, default=None, help="Email claim")
    token.add_argument("--minutes", type=int, default=None, help="Lifetime in minutes")

    subparsers.add_parser("init-db", help="Create catalog tables")

    return parser


def main():
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args()
    console = Console()

    from app.core.config import settings

    if args.command == "serve":
        import uvicorn
        uvicorn.run(
            "app.main:app",
            host=args.host or settings.SERVER_HOST,
            port=args.port or settings.SERVER_PORT,
            reload=args.reload,
        )

    elif args.command == "token":
        from app.core.security import create_access_token

        user_id = args.user_id or str(uuid.uuid4())
        try:
            user_id = str(uuid.UUID(user_id))
        except ValueError:
            console.print(f"[red]✗ --user-id must be a UUID, got {user_id!r}[/red]")
            sys.exit(1)

        claims = {"sub": user_id}
        if args.email:
            claims["email"] = args.email
        expires = timedelta(minutes=args.minutes) if args.minutes else None

        console.print(f"[dim]user:[/dim] {user_id}", highlight=False)
        print(create_access_token(claims, expires_delta=expires))

    elif args.command == "init-db":
        from app.core.database import init_db, close_db

        async def run():
            await init_db()
            await close_db()

        asyncio.run(run())
        console.print("[green]✓ Database tables ready[/green]")

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
