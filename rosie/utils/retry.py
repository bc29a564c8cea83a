import logging

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

# Stdlib logger: tenacity's before_sleep_log formats with %-style arguments.
logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (Exception,)


def retry_async(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 10.0,
    exceptions: tuple[type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
) -> AsyncRetrying:
    """
    Build an async retry controller with exponential backoff.

    Usage:
        async for attempt in retry_async(exceptions=(httpx.ConnectError,)):
            with attempt:
                response = await client.send(request, stream=True)
    """
    return AsyncRetrying(
        reraise=True,
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


__all__ = ["retry_async", "RETRYABLE_EXCEPTIONS"]
