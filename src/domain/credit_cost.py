"""Credit Cost Domain Entity

Configured credit price of a billable action.
"""

from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Integer, String, CheckConstraint
from src.domain.base import BaseModel, BigIntegerPK


class CreditCost(BaseModel, table=True):
    __tablename__ = "credit_costs"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="credits_non_negative"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    action_key: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True),
    )

    credits: int = Field(sa_column=Column(Integer, nullable=False))

    is_active: bool = Field(default=True)

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
    )
