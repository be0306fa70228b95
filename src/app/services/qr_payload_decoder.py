"""QR Payload Decoder Interface

Converts the text scanned from a customer's QR code into a structured
payload. Implementations are pure functions of their input.
"""

from abc import ABC, abstractmethod
from typing import Optional
from pydantic import BaseModel


class QrPayload(BaseModel):
    """
    Decoded QR content

    account_id is whatever the payload carried; it may be missing or not
    a valid identifier, in which case the payload is treated as malformed.
    """

    account_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class QrPayloadDecoder(ABC):

    @abstractmethod
    def decode(self, raw: str) -> Optional[QrPayload]:
        """
        Decode scanned text

        Returns:
            QrPayload if `raw` is a structured payload, None if it is plain
            text (a typed search term)
        """
        pass

    @abstractmethod
    def encode(self, account_id: str, email: str, name: str) -> str:
        """Produce the text a customer's QR code should carry"""
        pass
