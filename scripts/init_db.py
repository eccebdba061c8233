#!/usr/bin/env python3
"""
Initialize database with all tables
"""
import asyncio
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from standup_tracker.database import init_models
from standup_tracker.models.base import Base


async def init_database():
    """Create all tables"""
    print("🗄️  Initializing database...")

    await init_models()

    print(f"Tables: {', '.join([t.name for t in Base.metadata.sorted_tables])}")
    print("✅ Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
