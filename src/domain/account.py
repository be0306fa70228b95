"""Account Domain Entity

One customer's loyalty standing. The point balance is a materialized
projection of the account's LedgerEntry history and is only ever changed
through the ledger's atomic balance update.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Integer, String
from src.domain.base import BaseModel, generate_uuid


class Account(BaseModel, table=True):
    """
    Account - Customer loyalty record

    Domain Rules:
    - id is an opaque UUID, stable and never reused
    - email is unique (one account per customer identity), stored lower-cased
    - points_balance is a non-negative integer
    - points_balance == sum(EARN points) - sum(REDEEM points)
    - version increases by one on every balance mutation
    - Accounts are never hard-deleted
    """

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint('points_balance >= 0', name='points_balance_non_negative'),
        Index('ix_accounts_created_at', 'created_at'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
        description="Opaque account identifier (UUID)"
    )

    email: str = Field(
        index=True,
        unique=True,
        description="Contact email (unique, lower-cased)"
    )

    name: str = Field(
        description="Display name"
    )

    phone_number: Optional[str] = Field(
        default=None,
        description="Optional phone number"
    )

    points_balance: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Current point balance (must be >= 0)"
    )

    version: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Balance version, incremented on each ledger mutation"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Account creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last balance update timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "0b6a1c1e-5f0e-4d3b-9c59-3c1f8f2a7d11",
                "email": "jane@example.com",
                "name": "Jane Doe",
                "phone_number": "+6591234567",
                "points_balance": 40,
                "version": 2,
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z"
            }
        }
