from .unit_of_work import UnitOfWork
from .qr_payload_decoder import QrPayload, QrPayloadDecoder
from .read_retry import retry_read_once, TRANSIENT_ERRORS

__all__ = [
    "UnitOfWork",
    "QrPayload",
    "QrPayloadDecoder",
    "retry_read_once",
    "TRANSIENT_ERRORS",
]
