"""Worker pool for stats-store I/O issued from the async web path."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Final

# Store writes are small and serialised per file, so a few threads suffice.
STORE_WORKERS: Final = 4

_STORE_POOL = ThreadPoolExecutor(max_workers=STORE_WORKERS, thread_name_prefix="rps-store")


def submit_store_io(func: Callable[..., Any], /, *args: Any) -> asyncio.Future[Any]:
    """Hand *func* to a store worker and return the loop future tracking it.

    Cancelling a coroutine that awaits the returned future does not stop the
    worker; callers that must observe completion attach a done callback.
    """

    loop = asyncio.get_running_loop()
    return loop.run_in_executor(_STORE_POOL, partial(func, *args))


async def run_store_io(func: Callable[..., Any], /, *args: Any) -> Any:
    return await submit_store_io(func, *args)
