"""Company reference entity

Read-only here; the company directory is maintained elsewhere. The ledger
only needs names for the aging breakdown.
"""

from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, IdType


class Company(BaseModel, table=True):
    __tablename__ = "companies"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    name: str = Field(sa_column=Column(String(255), nullable=False))
