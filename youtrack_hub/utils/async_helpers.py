import asyncio
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")


def _has_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def run_async(coro: Coroutine[object, object, T]) -> T:
    """Run a client coroutine to completion from synchronous code.

    ``asyncio.run`` refuses to start while another loop runs in this thread
    (e.g., a notebook kernel), so there the coroutine gets its own loop on a
    worker thread.

    Usage:
        issues = run_async(client.list_issues("project: PROJ #Unresolved"))
    """
    if not _has_running_loop():
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="youtrack-run-async") as pool:
        return pool.submit(asyncio.run, coro).result()
