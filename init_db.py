#!/usr/bin/env python3
"""
Create the GeoSnap tables (users, sessions, otp_codes) if they are missing
"""

import asyncio
import sys

from tortoise.exceptions import BaseORMException

from app.db import init_db, close_db

async def initialize_database() -> bool:
    print("Initializing GeoSnap database...")
    try:
        await init_db()
    except (BaseORMException, OSError) as e:
        print(f"Database initialization failed: {e}")
        return False
    await close_db()
    print("Database initialized successfully!")
    return True

if __name__ == "__main__":
    if not asyncio.run(initialize_database()):
        sys.exit(1)
