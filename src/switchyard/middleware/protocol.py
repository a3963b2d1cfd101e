"""Middleware protocol and the pipeline runner.

A middleware is any callable matching::

    async def my_mw(request: CanonicalRequest) -> CanonicalRequest | Halt | None: ...

No base class required. Sync functions work too. The return value decides
what happens next:

- a ``CanonicalRequest``: continue with it in place of the previous one
- ``None``: continue with the request unchanged
- ``Halt(result)``: stop; nothing after it runs, not even the handler,
  and ``result`` becomes the dispatch result
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias

from switchyard._internal.invoke import invoke
from switchyard.request import CanonicalRequest


@dataclass(frozen=True, slots=True)
class Halt:
    """Short-circuit signal carrying the final result."""

    result: Any


MiddlewareResult: TypeAlias = CanonicalRequest | Halt | None


class Middleware(Protocol):
    """Protocol for switchyard middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def stamp(request: CanonicalRequest) -> CanonicalRequest:
            return request.with_context(request_id=request.request_id or "local")

        # Class middleware
        class RequireGroup:
            async def __call__(self, request: CanonicalRequest) -> Halt | None:
                ...
    """

    async def __call__(self, request: CanonicalRequest) -> MiddlewareResult: ...


async def run_pipeline(middleware: Iterable[Any], request: CanonicalRequest) -> CanonicalRequest | Halt:
    """Run *middleware* strictly in order, awaiting each before the next.

    Returns the final request, or the first ``Halt`` encountered.
    Exceptions propagate unchanged.
    """
    current = request
    for mw in middleware:
        result = await invoke(mw, current)
        if isinstance(result, Halt):
            return result
        if result is None:
            continue
        if not isinstance(result, CanonicalRequest):
            msg = (
                f"Middleware {mw!r} returned {type(result).__name__}; expected "
                "CanonicalRequest, Halt, or None."
            )
            raise TypeError(msg)
        current = result
    return current
