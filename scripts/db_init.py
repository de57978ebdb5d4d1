#!/usr/bin/env python3
"""
Database initialization and maintenance script
"""
import asyncio
import sys
from pathlib import Path

# Add the project root to the Python path
current_dir = Path(__file__).parent
root_dir = current_dir.parent
sys.path.insert(0, str(root_dir))

SAMPLE_CONFESSIONS = [
    "I still haven't returned the stapler I borrowed in 2019.",
    "I pretend to understand wine when people ask me to pick one.",
    "I water my neighbour's plants and they think they have a green thumb.",
    "I set three alarms and snooze every single one of them.",
    "I rehearse phone calls before making them.",
]

async def init_database() -> None:
    """Initialize database with tables"""
    from spicy_confessions.db.session import init_db
    from spicy_confessions.config import settings

    print(f"🚀 Initializing database: {settings.database_url}")

    try:
        await init_db()
        print("✅ Database initialized successfully")
    except Exception as e:
        print(f"❌ Error initializing database: {e}")
        sys.exit(1)

async def seed_confessions() -> None:
    """Create sample confessions for development"""
    from spicy_confessions.db.session import AsyncSessionLocal
    from spicy_confessions.schemas.confession_schema import ConfessionCreate
    from spicy_confessions.services.confession_service import ConfessionService
    from spicy_confessions.utils.pseudonyms import random_pseudonym

    print("📝 Seeding confessions...")

    async with AsyncSessionLocal() as db:
        confession_service = ConfessionService(db)
        existing = await confession_service.fetch_confessions()
        existing_texts = {c.text for c in existing}

        created_count = 0
        for text in SAMPLE_CONFESSIONS:
            if text in existing_texts:
                continue
            await confession_service.create_confession(
                ConfessionCreate(text=text, author=random_pseudonym())
            )
            created_count += 1

    print(f"✅ Created {created_count} confessions")

async def recount_likes() -> None:
    """Rewrite every stored like count from the likes table"""
    from spicy_confessions.db.session import AsyncSessionLocal
    from spicy_confessions.services.like_service import LikeService

    async with AsyncSessionLocal() as db:
        like_counts = await LikeService(db).recalculate_like_counts()

    print(f"✅ Recalculated like counts for {len(like_counts)} confessions")

async def check_database_connection() -> bool:
    """Check if database is accessible"""
    from spicy_confessions.db.session import engine
    from sqlalchemy import text

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print("✅ Database connection successful")
        return True
    except Exception as e:
        print(f"❌ Database connection failed: {e}")
        return False

async def drop_database(confirm: bool = False) -> None:
    """Drop all database tables"""
    if not confirm:
        print("⚠️  WARNING: This will drop ALL tables and data!")
        print("   Use --confirm flag to proceed")
        return

    from spicy_confessions.db.session import drop_db

    try:
        await drop_db()
        print("✅ Database dropped successfully")
    except Exception as e:
        print(f"❌ Error dropping database: {e}")

async def reset_database() -> None:
    """Drop and recreate all tables in one event loop"""
    await drop_database(True)
    await init_database()

def main() -> None:
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="Database Initialization")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Initialize database")
    subparsers.add_parser("check", help="Check database connection")

    drop_parser = subparsers.add_parser("drop", help="Drop database (DANGEROUS!)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm drop")

    subparsers.add_parser("seed", help="Seed sample confessions")
    subparsers.add_parser("recount", help="Recalculate like counts")

    reset_parser = subparsers.add_parser("reset", help="Drop and reinitialize")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm reset")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "init":
            asyncio.run(init_database())

        elif args.command == "check":
            success = asyncio.run(check_database_connection())
            sys.exit(0 if success else 1)

        elif args.command == "drop":
            asyncio.run(drop_database(args.confirm))

        elif args.command == "seed":
            asyncio.run(seed_confessions())

        elif args.command == "recount":
            asyncio.run(recount_likes())

        elif args.command == "reset":
            if not args.confirm:
                print("⚠️  WARNING: This will drop ALL tables and data!")
                print("   Use --confirm flag to proceed")
                return

            asyncio.run(reset_database())

    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
