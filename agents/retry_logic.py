import asyncio
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from mistralai.models import SDKError

from app.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


RATE_LIMIT_MARKERS = ("429", "rate limit", "rate_limit", "rate-limit", "ratelimit", "capacity")


def is_rate_limited(exc: BaseException) -> bool:
    if getattr(exc, "status_code", None) == 429:
        return True
    msg = str(exc).lower()
    return any(marker in msg for marker in RATE_LIMIT_MARKERS)


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 5,
    base_delay: float = 0.8,
    max_delay: float = 8.0,
    retry_on: Tuple[Type[BaseException], ...] = (SDKError,),
) -> T:
    """
    Await `fn()` and retry on 429 / rate-limit errors with exponential backoff.
    Any other error is raised straight away.
    """
    attempt = 0

    while True:
        try:
            return await fn()

        except retry_on as e:
            if not is_rate_limited(e):
                raise

            attempt += 1
            if attempt > max_retries:
                raise

            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
            sleep_time = delay + random.uniform(0, delay * 0.3)

            logger.warning("LLM rate limited, attempt %d/%d, sleeping %.2fs", attempt, max_retries, sleep_time)
            await asyncio.sleep(sleep_time)
