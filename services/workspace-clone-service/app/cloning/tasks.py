# services/workspace-clone-service/app/cloning/tasks.py
from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, List, TypeVar

T = TypeVar("T")


async def cancel_and_wait(*tasks: "asyncio.Future") -> None:
    pending = [t for t in tasks if not t.done()]
    for t in pending:
        t.cancel()
    # settle every task so no exception goes unretrieved
    await asyncio.gather(*tasks, return_exceptions=True)


async def gather_all(aws: Iterable[Awaitable[T]]) -> List[T]:
    """
    asyncio.gather over sibling work, except that the first failure cancels the
    siblings still running before it propagates.
    """
    tasks = [asyncio.ensure_future(a) for a in aws]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        await cancel_and_wait(*tasks)
        raise
