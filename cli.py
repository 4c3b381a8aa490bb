#!/usr/bin/env python
"""
Legajos - Command Line Interface
Server and database management, plus case queries and exports through the API.
"""
import argparse
import asyncio
import getpass
import json
import subprocess
import sys
from pathlib import Path

from loguru import logger

DEFAULT_TOKEN_FILE = "~/.legajos/token"


def configure_logging(verbose: bool = False):
    """Configure logging output."""
    level = "DEBUG" if verbose else "INFO"
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}",
        level=level,
    )


async def init_database():
    """Initialize database tables."""
    from core.database.session import dispose_engine, init_db_async
    await init_db_async()
    await dispose_engine()
    logger.info("Database initialized successfully")


def make_client(args):
    from client import LegajosClient

    client = LegajosClient(base_url=args.api_url, token_file=args.token_file)
    client.subscribe_unauthorized(
        lambda: logger.warning("Session expired or invalid - run 'legajos login' again")
    )
    return client


def save_download(result: tuple[str, bytes], output_dir: str) -> Path:
    file_name, content = result
    path = Path(output_dir) / file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    logger.info(f"Saved {path} ({len(content)} bytes)")
    return path


def print_cases(cases: list[dict]):
    from client.forms import format_person_summary

    for case in cases:
        persona = case.get("persona") or {}
        name = f"{persona.get('lastName', '')}, {persona.get('firstName', '')}".strip(", ")
        print(
            f"{case['id']}  {case['estadoRequerimiento']:<16} "
            f"{(case.get('numeroCausa') or '-'):<20} {name or '-'}"
        )
        print(f"    {format_person_summary(case.get('persona'))}")
    print(f"\n{len(cases)} caso(s)")


def run_cases_command(args):
    with make_client(args) as client:
        if args.action == "list":
            print_cases(client.list_cases(args.estado))
        elif args.action == "show":
            print(json.dumps(client.get_case(args.case_id), indent=2, ensure_ascii=False))
        elif args.action == "export-pdf":
            save_download(client.export_case_pdf(args.case_id), args.output)
        elif args.action == "export-zip":
            save_download(client.export_case_zip(args.case_id), args.output)
        elif args.action == "export-excel":
            save_download(client.export_cases_excel(args.ids), args.output)
        elif args.action == "export-all":
            save_download(client.export_all_cases(args.estado), args.output)


def main():
    parser = argparse.ArgumentParser(
        description="Legajos CLI - Case files, persons and sources"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--api-url", default=None, help="API base URL (default: $LEGAJOS_API_URL)")
    parser.add_argument("--token-file", default=DEFAULT_TOKEN_FILE, help="Where the session token is kept")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("server", help="Start API server")
    server_parser.add_argument("--host", default=None, help="Host to bind")
    server_parser.add_argument("--port", type=int, default=None, help="Port to bind")
    server_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # Database command
    db_parser = subparsers.add_parser("db", help="Database operations")
    db_parser.add_argument("action", choices=["init", "migrate"], help="Database action")

    seed_parser = subparsers.add_parser("seed", help="Create the initial admin user")
    seed_parser.add_argument("--samples", action="store_true", help="Also create sample sources")

    login_parser = subparsers.add_parser("login", help="Log in and store the session token")
    login_parser.add_argument("email")
    login_parser.add_argument("--password", help="Password (prompted when omitted)")

    cases_parser = subparsers.add_parser("cases", help="Query and export cases")
    cases_sub = cases_parser.add_subparsers(dest="action", required=True)
    list_parser = cases_sub.add_parser("list", help="List cases")
    list_parser.add_argument("--estado", help="Filter by estado de requerimiento")
    show_parser = cases_sub.add_parser("show", help="Show one case as JSON")
    show_parser.add_argument("case_id")
    for name in ("export-pdf", "export-zip"):
        export_parser = cases_sub.add_parser(name, help=f"Download a case ({name[7:]})")
        export_parser.add_argument("case_id")
        export_parser.add_argument("--output", "-o", default=".", help="Output directory")
    excel_parser = cases_sub.add_parser("export-excel", help="Download selected cases as Excel")
    excel_parser.add_argument("ids", nargs="+", help="Case IDs")
    excel_parser.add_argument("--output", "-o", default=".", help="Output directory")
    all_parser = cases_sub.add_parser("export-all", help="Download every case as nested ZIPs")
    all_parser.add_argument("--estado", help="Only cases in this state (default: TODOS)")
    all_parser.add_argument("--output", "-o", default=".", help="Output directory")

    users_parser = subparsers.add_parser("users", help="User administration")
    users_parser.add_argument("action", choices=["list"], help="Users action")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.verbose)

    from client import ApiError

    try:
        if args.command == "server":
            import uvicorn

            from core.config import api_settings
            uvicorn.run(
                "api.main:app",
                host=args.host or api_settings.host,
                port=args.port or api_settings.port,
                reload=args.reload,
            )

        elif args.command == "db":
            if args.action == "init":
                asyncio.run(init_database())
            elif args.action == "migrate":
                sys.exit(subprocess.call(["alembic", "upgrade", "head"]))

        elif args.command == "seed":
            from scripts.seed_data import seed
            asyncio.run(seed(with_samples=args.samples))

        elif args.command == "login":
            password = args.password or getpass.getpass("Contraseña: ")
            with make_client(args) as client:
                user = client.login(args.email, password)
            logger.info(f"Logged in as {user['email']} ({user['role']})")

        elif args.command == "cases":
            run_cases_command(args)

        elif args.command == "users":
            with make_client(args) as client:
                for user in client.list_users():
                    state = "activo" if user["isActive"] else "inactivo"
                    print(f"{user['id']}  {user['role']:<10} {state:<8} {user['email']}")

    except ApiError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
