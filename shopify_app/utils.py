"""Small shared helpers."""

import inspect
from typing import Any, Callable


async def call_maybe_async(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call `func` and await the result if it is awaitable.

    Lets user-supplied callbacks be either coroutine functions or plain
    callables.
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
