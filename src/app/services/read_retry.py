"""Single retry with backoff for idempotent reads"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar
from sqlalchemy.exc import InterfaceError, OperationalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (OperationalError, InterfaceError)


async def retry_read_once(
    read: Callable[[], Awaitable[T]],
    backoff_seconds: float = 0.2,
    before_retry: Optional[Callable[[], Awaitable[None]]] = None,
) -> T:
    """
    Run `read`; on a transient storage error wait and run it exactly once more

    Only for reads: mutations are never retried here.

    Args:
        read: Zero-argument coroutine factory performing the read
        backoff_seconds: Delay before the second attempt
        before_retry: Optional cleanup (e.g. session rollback) before retrying

    Raises:
        The second attempt's exception if it fails again
    """
    try:
        return await read()
    except TRANSIENT_ERRORS as e:
        logger.warning(f"Transient storage error on read, retrying in {backoff_seconds}s: {e}")
        if before_retry is not None:
            await before_retry()
        await asyncio.sleep(backoff_seconds)
        return await read()
