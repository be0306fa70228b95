"""JSON QR payload decoder

Customer QR codes carry a JSON object such as
``{"userId": "...", "email": "...", "name": "..."}``.
"""

import json
import logging
from typing import Optional
from src.app.services.qr_payload_decoder import QrPayload, QrPayloadDecoder

logger = logging.getLogger(__name__)

ACCOUNT_ID_KEYS = ("userId", "accountId", "account_id")


class JsonQrPayloadDecoder(QrPayloadDecoder):

    def decode(self, raw: str) -> Optional[QrPayload]:
        text = raw.strip()
        if not text.startswith("{"):
            return None

        try:
            data = json.loads(text)
        except ValueError:
            # Looks structured but isn't: caller falls back to a text search
            logger.debug("Unparseable QR payload, treating as malformed")
            return QrPayload()

        if not isinstance(data, dict):
            return QrPayload()

        account_id = None
        for key in ACCOUNT_ID_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                account_id = value.strip()
                break

        email = data.get("email")
        name = data.get("name")
        return QrPayload(
            account_id=account_id,
            email=email if isinstance(email, str) else None,
            name=name if isinstance(name, str) else None,
        )

    def encode(self, account_id: str, email: str, name: str) -> str:
        return json.dumps({"userId": account_id, "email": email, "name": name})
