"""Test helper utilities."""

import asyncio


async def wait_for_condition(
    condition_func,
    timeout: float = 5.0,
    interval: float = 0.01,
    error_message: str = "Condition not met within timeout",
):
    """Wait for a condition to become true."""
    loop = asyncio.get_running_loop()
    start_time = loop.time()
    while loop.time() - start_time < timeout:
        if await condition_func() if asyncio.iscoroutinefunction(condition_func) else condition_func():
            return True
        await asyncio.sleep(interval)
    raise TimeoutError(error_message)
