"""Caller identity

Role and clinic affiliation come from explicit claims forwarded by the
identity provider / gateway as request headers. The service trusts them
and never derives a role from the email address.
"""

from enum import Enum
from typing import Optional
from fastapi import Depends, Header, status
from pydantic import BaseModel
from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError
from src.app.use_cases.loyalty import errors


class CallerRole(str, Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


class Caller(BaseModel):
    role: CallerRole
    clinic_id: Optional[str] = None
    caller_id: Optional[str] = None

    def require_clinic(self) -> str:
        """Clinic to attribute ledger entries to"""
        if not self.clinic_id:
            raise ClientError(
                Error(code=errors.CLINIC_REQUIRED, message="A clinic affiliation is required for this action"),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return self.clinic_id

    def require_self_or_staff(self, account_id: str) -> None:
        """Customers may only read their own account"""
        if self.role == CallerRole.CUSTOMER and self.caller_id != account_id:
            raise ClientError(
                Error(code=errors.FORBIDDEN, message="Not allowed to access this account"),
                status_code=status.HTTP_403_FORBIDDEN,
            )


async def get_caller(
    x_caller_role: Optional[str] = Header(default=None),
    x_clinic_id: Optional[str] = Header(default=None),
    x_caller_id: Optional[str] = Header(default=None),
) -> Caller:
    if ApplicationConfig.AUTH_DISABLED:
        return Caller(role=CallerRole.ADMIN, clinic_id=x_clinic_id, caller_id=x_caller_id)

    try:
        role = CallerRole((x_caller_role or "").strip().lower())
    except ValueError:
        raise ClientError(
            Error(code=errors.UNAUTHENTICATED, message="Caller role is missing or unknown"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        ) from None

    return Caller(role=role, clinic_id=x_clinic_id or None, caller_id=x_caller_id or None)


def require_roles(*roles: CallerRole):
    async def dependency(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in roles:
            raise ClientError(
                Error(code=errors.FORBIDDEN, message="Not allowed to perform this action"),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return caller

    return dependency


require_staff = require_roles(CallerRole.STAFF, CallerRole.ADMIN)
require_admin = require_roles(CallerRole.ADMIN)
