"""Request-scoped tenant binding via ContextVar.

The bound ``TenantInfo`` is readable anywhere in the request's async call
graph without passing it around, and is never visible to a concurrently
running request in the same process.

Thread and task safety:
    ``ContextVar`` is task-local under asyncio/anyio (each task runs in a
    copy of its parent's context) and thread-local across threads. A value
    set inside one dispatch can't reach another dispatch, and tasks spawned
    inside a binding inherit it.

Entry points:
    ``run(tenant, fn)``  — explicit scope for non-HTTP handlers.
    ``bind()``           — scope opened by the dispatcher around each event.
    ``set_current(t)``   — used by middleware inside the dispatcher's scope.

Consumption::

    from switchyard import tenant

    tenant_id = tenant.current().tenant_id   # fail-closed
    maybe = tenant.current_optional()        # None when unbound
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from switchyard._internal.invoke import invoke
from switchyard.errors import TenantContextError
from switchyard.tenant.types import TenantInfo

_tenant_var: ContextVar[TenantInfo | None] = ContextVar("switchyard_tenant", default=None)


@contextmanager
def bind(tenant: TenantInfo | None = None) -> Iterator[None]:
    """Open a tenant scope for the duration of the ``with`` block.

    Anything ``set_current()`` binds inside the block is discarded on
    exit, and the previous binding (if any) is restored.
    """
    token = _tenant_var.set(tenant)
    try:
        yield
    finally:
        _tenant_var.reset(token)


async def run(tenant: TenantInfo, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call *callback* (sync or async) with *tenant* bound, and return its result.

    The binding covers all async work the callback awaits or spawns and
    is released once it completes::

        await tenant.run(info, sync_properties, status="PUBLISHED")
    """
    with bind(tenant):
        return await invoke(callback, *args, **kwargs)


def set_current(tenant: TenantInfo) -> None:
    """Bind *tenant* into the currently active scope.

    Meant for middleware running inside the dispatcher's per-request
    scope; the binding ends when that scope exits. Tasks started before
    this call keep the value they were created with.
    """
    _tenant_var.set(tenant)


def current() -> TenantInfo:
    """Return the bound tenant.

    Raises ``TenantContextError`` when nothing is bound. Use this in code
    that must never run tenant-unaware (repositories, guards).
    """
    tenant = _tenant_var.get()
    if tenant is None:
        raise TenantContextError
    return tenant


def current_optional() -> TenantInfo | None:
    """Return the bound tenant, or ``None``."""
    return _tenant_var.get()


def is_active() -> bool:
    return _tenant_var.get() is not None
