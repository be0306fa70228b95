"""ResolveAccount Use Case

Maps whatever staff typed or scanned to exactly one customer account.
"""

import logging
import re
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.account_repository import AccountRepository
from src.app.services.qr_payload_decoder import QrPayloadDecoder
from src.domain.account import Account
from . import errors
from .dtos import AccountDTO, ResolvedAccountDTO

logger = logging.getLogger(__name__)

TIE_BREAK_MOST_RECENT = "most_recent"
TIE_BREAK_STRICT = "strict"

_ACCOUNT_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_account_id(token: Optional[str]) -> bool:
    """True only for a canonical hyphenated UUID"""
    return bool(token) and _ACCOUNT_ID_PATTERN.match(token) is not None


class ResolveAccount:
    """
    Use Case: Resolve a search token to one account

    Business Rules:
    1. A structured (QR) payload with a valid embedded id is looked up by
       exact id only; it never falls through to a fuzzy search
    2. A malformed payload is searched as plain text
    3. Exact id equality is used only when the token is a canonical UUID;
       anything else goes to the substring search, which never reads the
       id column
    4. Substring search covers email, name and phone number
    5. Several matches: most recently created wins, unless tie_break is
       "strict", in which case AMBIGUOUS_MATCH is returned
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        qr_decoder: QrPayloadDecoder,
        tie_break: str = TIE_BREAK_MOST_RECENT,
        search_limit: int = 25,
    ):
        if tie_break not in (TIE_BREAK_MOST_RECENT, TIE_BREAK_STRICT):
            raise ValueError(f"Unknown tie_break {tie_break!r}")
        self.account_repo = account_repo
        self.qr_decoder = qr_decoder
        self.tie_break = tie_break
        self.search_limit = search_limit

    async def execute(self, token: str) -> Result[ResolvedAccountDTO]:
        """
        Args:
            token: Raw account id, email/name/phone fragment, or scanned QR text

        Returns:
            Result[ResolvedAccountDTO]: The matched account or error

        Errors:
            ACCOUNT_NOT_FOUND, AMBIGUOUS_MATCH (strict mode only)
        """
        token = (token or "").strip()
        if not token:
            return self._not_found(token, "empty search token")

        try:
            payload = self.qr_decoder.decode(token)
            if payload is not None and is_account_id(payload.account_id):
                account = await self.account_repo.get_by_id(payload.account_id.lower())
                if account:
                    return self._resolved(account, "qr", 1)
                return self._not_found(token, f"QR payload account {payload.account_id} does not exist")

            if payload is None and is_account_id(token):
                account = await self.account_repo.get_by_id(token.lower())
                if account:
                    return self._resolved(account, "id", 1)

            if payload is not None:
                logger.info("Malformed QR payload, falling back to text search")

            matches = await self.account_repo.search(token, self.search_limit)

        except Exception as e:
            logger.error(f"Account resolution failed: {e}")
            return Return.err(
                Error(
                    code=errors.RESOLVE_ACCOUNT_FAILED,
                    message="Customer lookup failed",
                    reason=str(e),
                )
            )

        if not matches:
            return self._not_found(token, "no email, name or phone match")

        if len(matches) > 1 and self.tie_break == TIE_BREAK_STRICT:
            return Return.err(
                Error(
                    code=errors.AMBIGUOUS_MATCH,
                    message="Multiple customers match, please refine the search",
                    reason=f"{len(matches)} matches",
                )
            )

        # Repository orders by created_at desc, so the first match is the most recent
        return self._resolved(matches[0], "search", len(matches))

    def _resolved(self, account: Account, match_type: str, match_count: int) -> Result[ResolvedAccountDTO]:
        return Return.ok(
            ResolvedAccountDTO(
                account=AccountDTO.from_account(account),
                match_type=match_type,
                match_count=match_count,
            )
        )

    def _not_found(self, token: str, reason: str) -> Result[ResolvedAccountDTO]:
        return Return.err(
            Error(
                code=errors.ACCOUNT_NOT_FOUND,
                message="Customer not found",
                reason=reason,
            )
        )
