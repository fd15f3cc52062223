#!/usr/bin/env python3
"""Admin script to bootstrap administrator accounts.

Usage:
    python scripts/create_admin.py <username> <email> <password>
    python scripts/create_admin.py --promote <username>
"""

import asyncio
import logging
import sys

from todo_backend.core.db_client import close_connection
from todo_backend.core.errors import AppError
from todo_backend.core.schema import init_db
from todo_backend.core.security import BcryptPasswordHasher
from todo_backend.core.sqlite_stores import SqliteCredentialStore
from todo_backend.domain.create_models import UserCreate
from todo_backend.domain.update_models import UserUpdate
from todo_backend.domain.user import UserRole
from todo_backend.services.user_service import UserService


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


async def create_admin(service: UserService, username: str, email: str, password: str) -> None:
    """Create a new account with the ADMIN role."""
    user = await service.create_as_admin(
        draft=UserCreate(username=username, email=email, password=password),
        role=UserRole.ADMIN.value,
    )
    logger.info(f"Created admin {user.username} ({user.id})")


async def promote(store: SqliteCredentialStore, service: UserService, username: str) -> None:
    """Give an existing account the ADMIN role."""
    user = await store.find_by_username(username)
    if user is None:
        logger.error(f"No user named {username}")
        sys.exit(1)

    if user.role == UserRole.ADMIN:
        logger.info(f"{username} is already an admin")
        return

    await service.update_user(user_id=user.id, patch=UserUpdate(role=UserRole.ADMIN.value))
    logger.info(f"Promoted {username} to admin")


def print_usage() -> None:
    """Print usage information."""
    logger.info(__doc__)


async def main() -> None:
    """Main entry point."""
    args = sys.argv[1:]

    if not args or "--help" in args or "-h" in args:
        print_usage()
        return

    await init_db()
    store = SqliteCredentialStore()
    service = UserService(store, BcryptPasswordHasher())
    try:
        if args[0] == "--promote" and len(args) == 2:
            await promote(store, service, args[1])
        elif len(args) == 3:
            await create_admin(service, *args)
        else:
            print_usage()
            sys.exit(1)
    except AppError as e:
        logger.error(e.message)
        sys.exit(1)
    finally:
        await close_connection()


if __name__ == "__main__":
    asyncio.run(main())
