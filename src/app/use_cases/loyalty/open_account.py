"""OpenAccount Use Case

Creates the loyalty account for a customer identity the first time it
authenticates. Safe to call on every login.
"""

import logging
from libs.result import Result, Return, Error
from sqlalchemy.exc import IntegrityError
from src.app.repositories.account_repository import AccountRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.account import Account
from . import errors
from .dtos import AccountDTO, OpenAccountCommandDTO, OpenAccountResponseDTO
from .resolve_account import is_account_id

logger = logging.getLogger(__name__)


class OpenAccount:
    """
    Use Case: Open (or return) a customer's account

    Business Rules:
    1. account_id, when supplied, must be a canonical UUID
    2. Existing account with the same id or email is returned unchanged
    3. Emails are stored trimmed and lower-cased, so the unique index
       rejects addresses that differ only in case
    4. New accounts start at a zero balance
    5. A concurrent open for the same identity resolves to the winner's row
    """

    def __init__(self, uow: UnitOfWork, account_repo: AccountRepository):
        self.uow = uow
        self.account_repo = account_repo

    async def execute(self, command: OpenAccountCommandDTO) -> Result[OpenAccountResponseDTO]:
        if command.account_id is not None and not is_account_id(command.account_id):
            return Return.err(
                Error(
                    code=errors.OPEN_ACCOUNT_FAILED,
                    message="Account id must be a UUID",
                    reason=f"account_id={command.account_id!r}",
                )
            )

        account_id = command.account_id.lower() if command.account_id else None
        email = command.email.strip().lower()

        try:
            existing = await self._find_existing(account_id, email)
            if existing:
                return Return.ok(OpenAccountResponseDTO(account=AccountDTO.from_account(existing), created=False))

            account = Account(
                email=email,
                name=command.name.strip(),
                phone_number=command.phone_number,
            )
            if account_id:
                account.id = account_id

            created = await self.account_repo.create(account)
            await self.uow.commit()
            logger.info(f"Opened account {created.id}")
            return Return.ok(OpenAccountResponseDTO(account=AccountDTO.from_account(created), created=True))

        except IntegrityError:
            await self.uow.rollback()
            existing = await self._find_existing(account_id, email)
            if existing:
                return Return.ok(OpenAccountResponseDTO(account=AccountDTO.from_account(existing), created=False))
            return Return.err(
                Error(
                    code=errors.OPEN_ACCOUNT_FAILED,
                    message="Failed to open account",
                    reason="conflicting account without matching id or email",
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Opening account failed: {e}")
            return Return.err(
                Error(
                    code=errors.OPEN_ACCOUNT_FAILED,
                    message="Failed to open account",
                    reason=str(e),
                )
            )

    async def _find_existing(self, account_id, email: str):
        if account_id:
            account = await self.account_repo.get_by_id(account_id)
            if account:
                return account
        return await self.account_repo.get_by_email(email)
