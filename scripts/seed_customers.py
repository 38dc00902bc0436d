"""
Seed demo customers so loans can be opened against known ids.
Run: python -m scripts.seed_customers (from the project root).
"""
import asyncio
import os
import sys

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import AsyncSessionLocal, init_db
from log_config import get_logger, setup_logging
from services.loan_store import SqlLoanStore

logger = get_logger(__name__)

CUSTOMERS_DATA = [
    {"id": "cust_123", "name": "Alice Smith"},
]


async def seed():
    await init_db()
    async with AsyncSessionLocal() as session:
        store = SqlLoanStore(session)
        for data in CUSTOMERS_DATA:
            if await store.get_customer(data["id"]):
                logger.info("Customer %s already exists, skipping", data["id"])
                continue
            await store.create_customer(data["id"], data["name"])
            logger.info("Seeded customer: %s", data["name"])
        await session.commit()
    logger.info("Seed complete.")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
