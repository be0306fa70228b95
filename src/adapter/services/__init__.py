from .unit_of_work import SqlAlchemyUnitOfWork
from .qr_payload_decoder import JsonQrPayloadDecoder

__all__ = [
    "SqlAlchemyUnitOfWork",
    "JsonQrPayloadDecoder",
]
