from typing import Optional

from pydantic import BaseModel, Field


class CustomerCreate(BaseModel):
    customer_id: Optional[str] = Field(None, description="Chosen id; generated when omitted")
    name: str
