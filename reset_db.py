import asyncio
import sys
import os

# Add backend/ to the import path to import autoshop.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from autoshop.core.database import engine
from autoshop.models import Base


async def reset():
    print("Connecting to the database, dropping tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        print("Tables dropped. Creating tables...")
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("Database reset complete.")

if __name__ == "__main__":
    asyncio.run(reset())
