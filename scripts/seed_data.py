#!/usr/bin/env python3
"""Legajos - Seed Data Script
Create (or refresh) the initial admin account, optionally with sample sources.
"""

import asyncio
import os

from loguru import logger

SAMPLE_SOURCES = [
    {"name": "Registro Nacional de las Personas", "kind": "REGISTRO", "description": "Consulta de identidad"},
    {"name": "Redes sociales", "kind": "OSINT", "description": "Perfiles públicos"},
    {"name": "Informante", "kind": "HUMINT", "description": None},
]


def admin_from_env() -> dict:
    return {
        "email": os.getenv("SEED_ADMIN_EMAIL", "admin@example.com").strip().lower(),
        "password": os.getenv("SEED_ADMIN_PASSWORD", "changeme123"),
        "first_name": os.getenv("SEED_ADMIN_FIRST_NAME", "Admin"),
        "last_name": os.getenv("SEED_ADMIN_LAST_NAME", "Principal"),
    }


async def seed(with_samples: bool = False):
    """Upsert the admin user. Running it twice leaves a single admin."""
    from sqlalchemy import select

    from api.auth import get_password_hash
    from core.database import Source, User
    from core.database.models import UserRole
    from core.database.session import dispose_engine, get_async_session, init_db_async

    await init_db_async()
    admin = admin_from_env()

    async with get_async_session() as db:
        result = await db.execute(select(User).where(User.email == admin["email"]))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(email=admin["email"])
            db.add(user)
            logger.info(f"Creating admin user {admin['email']}")
        else:
            logger.info(f"Refreshing admin user {admin['email']}")

        user.first_name = admin["first_name"]
        user.last_name = admin["last_name"]
        user.password_hash = get_password_hash(admin["password"])
        user.role = UserRole.ADMIN
        user.is_active = True

        if with_samples:
            for source_data in SAMPLE_SOURCES:
                existing = await db.execute(select(Source).where(Source.name == source_data["name"]))
                if existing.scalar_one_or_none():
                    logger.debug(f"Source {source_data['name']} already exists, skipping")
                    continue
                db.add(Source(**source_data))
                logger.info(f"Created source: {source_data['name']}")

    await dispose_engine()
    logger.info(f"Usuario admin listo: {admin['email']}")


async def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Seed Legajos database")
    parser.add_argument(
        "--samples",
        action="store_true",
        help="Also create sample intelligence sources",
    )
    args = parser.parse_args()
    await seed(with_samples=args.samples)


if __name__ == "__main__":
    asyncio.run(main())
