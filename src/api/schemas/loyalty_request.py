"""Request schemas for Loyalty API

Pydantic models for validating incoming HTTP requests.

Amounts are only type-checked here; sign checks belong to the use cases
so a non-positive amount comes back as INVALID_AMOUNT.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class OpenAccountRequestSchema(BaseModel):
    """
    Request schema for opening an account

    Used for POST /loyalty/accounts endpoint.
    """

    account_id: Optional[str] = Field(
        default=None,
        description="Identity-provider subject id (UUID); generated when omitted"
    )

    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        description="Contact email"
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )

    phone_number: Optional[str] = Field(
        default=None,
        max_length=32,
        description="Optional phone number"
    )

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("Email must contain '@'")
        return v.strip()


class AwardRequestSchema(BaseModel):
    """
    Request schema for awarding points

    Used for POST /loyalty/accounts/{account_id}/award endpoint.
    """

    bill_amount: Decimal = Field(
        ...,
        max_digits=18,
        decimal_places=2,
        description="Amount spent (must be > 0)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Client-generated token, reused verbatim on retries"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "bill_amount": "100.00",
                "idempotency_key": "terminal-3:1704067200:award"
            }
        }


class RedeemRequestSchema(BaseModel):
    """
    Request schema for redeeming points

    Used for POST /loyalty/accounts/{account_id}/redeem endpoint.
    """

    points: int = Field(
        ...,
        description="Points to redeem (must be > 0)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Client-generated token, reused verbatim on retries"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "points": 60,
                "idempotency_key": "terminal-3:1704067260:redeem"
            }
        }


class UpdateRatesRequestSchema(BaseModel):
    """
    Request schema for changing rates

    Used for PUT /loyalty/rates endpoint.
    """

    earn_rate: Decimal = Field(
        ...,
        max_digits=18,
        decimal_places=6,
        description="Points earned per currency unit spent"
    )

    redeem_rate: Decimal = Field(
        ...,
        max_digits=18,
        decimal_places=6,
        description="Cash value per point redeemed"
    )
