"""Create the initial portal admin (ADMIN_EMAIL) and print its password once"""
import asyncio
import sys

from sqlalchemy import select

from app.core.config import settings
from app.core.database import get_session_local, init_db, close_db
from app.core.exceptions import PortalError
from app.models.profile import Profile
from app.services.account_service import AccountProvisioningService


async def create_admin(email: str):
    await init_db()

    session_local = get_session_local()
    async with session_local() as db:
        result = await db.execute(
            select(Profile).where(Profile.email == email.strip().lower())
        )
        existing = result.scalar_one_or_none()

        if existing:
            print(f"Account already exists: {existing.email} ({existing.role.value})")
            return

        account = await AccountProvisioningService(db).create_admin(email)

    print(f"Created admin user: {account.record.email}")
    print("\nLogin credentials (shown once):")
    print(f"Email: {account.record.email}")
    print(f"Password: {account.plaintext_secret}")


async def main():
    email = sys.argv[1] if len(sys.argv) > 1 else settings.ADMIN_EMAIL
    try:
        await create_admin(email)
    except PortalError as e:
        print(f"Failed: {e.message}")
        sys.exit(1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
