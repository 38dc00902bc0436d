from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.loan_store import LoanStore, SqlLoanStore


async def get_store(db: AsyncSession = Depends(get_db)) -> LoanStore:
    return SqlLoanStore(db)
