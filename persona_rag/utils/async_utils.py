"""Async utility functions."""

import asyncio
from typing import Any, Awaitable, Callable, List, Tuple, Type, TypeVar

T = TypeVar('T')


async def run_in_thread(func: Callable[[], T], timeout_seconds: float) -> T:
    """Run a blocking callable in the default executor with a timeout.

    Raises asyncio.TimeoutError when the call does not finish in time. The
    worker thread itself cannot be interrupted; only the wait is abandoned.
    """
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(
        loop.run_in_executor(None, func),
        timeout=timeout_seconds,
    )


async def gather_with_concurrency(
    factories: List[Callable[[], Awaitable[T]]],
    max_concurrency: int = 10,
) -> List[T]:
    """Run coroutine factories with limited concurrency.

    Each factory is called only once a slot is free, so work cancelled
    before it starts is never created. Results keep the order of
    ``factories``. The first failure cancels everything still waiting or
    running and is re-raised.
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _run_with_semaphore(factory: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await factory()

    limited_tasks = [asyncio.ensure_future(_run_with_semaphore(factory)) for factory in factories]

    try:
        return await asyncio.gather(*limited_tasks)
    except BaseException:
        for pending in limited_tasks:
            if not pending.done():
                pending.cancel()
        await asyncio.gather(*limited_tasks, return_exceptions=True)
        raise


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    on_retry: Callable[[int, BaseException], Any] = None,
) -> T:
    """Retry a function with exponential backoff.

    Only exceptions matching ``retry_on`` are retried; anything else
    propagates immediately.
    """
    delay = base_delay

    for attempt in range(max_retries + 1):
        try:
            return await func()
        except retry_on as e:
            if attempt == max_retries:
                raise
            if on_retry:
                on_retry(attempt + 1, e)

            await asyncio.sleep(min(delay, max_delay))
            delay *= backoff_factor

