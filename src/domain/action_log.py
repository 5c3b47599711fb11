"""Action Log Domain Entity

Append-only audit event, one per rate-limited action that was allowed.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from sqlmodel import Field, Column, Index
from sqlalchemy import String, JSON
from src.domain.base import BaseModel, BigIntegerPK


class ActionLog(BaseModel, table=True):
    __tablename__ = "action_logs"
    __table_args__ = (
        Index("ix_action_logs_tenant_action_created", "tenant_id", "action_type", "created_at"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(sa_column=Column(String(64), nullable=False))

    action_type: str = Field(sa_column=Column(String(100), nullable=False))

    log_metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column("metadata", JSON, nullable=True),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
