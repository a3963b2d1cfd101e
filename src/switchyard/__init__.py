"""Switchyard — an event dispatcher for serverless functions.

Routes HTTP gateway calls, event-bus notifications, queue batches and
direct invocations to exactly one handler each, with segmented security
classification and a request-scoped tenant context.

Basic usage::

    from switchyard import Dispatcher, Routes

    routes = Routes()

    @routes.get("/users/{id}")
    async def get_user(request):
        return {"statusCode": 200, "body": request.path_params["id"]}

    handler = Dispatcher(routes).lambda_handler
"""

__version__ = "0.1.0"
__all__ = [
    "CORSConfig",
    "CanonicalRequest",
    "ConfigurationError",
    "Dispatcher",
    "DispatcherConfig",
    "Halt",
    "Identity",
    "RequestContext",
    "ResponseOverrides",
    "Router",
    "Routes",
    "Segment",
    "SwitchyardError",
    "TenantContextError",
    "TenantInfo",
    "Trigger",
    "create_dispatcher",
    "crm_guard",
    "init_tenant_context",
    "tenant",
    "tenant_guard",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` cheap on cold starts.
    """
    if name in ("Dispatcher", "create_dispatcher"):
        from switchyard import dispatcher as _dispatcher

        return getattr(_dispatcher, name)

    if name in ("CORSConfig", "DispatcherConfig", "ResponseOverrides"):
        from switchyard import config as _config

        return getattr(_config, name)

    if name in ("CanonicalRequest", "RequestContext"):
        from switchyard import request as _request

        return getattr(_request, name)

    if name in ("Router", "Routes"):
        from switchyard.routing import router as _router

        return getattr(_router, name)

    if name in ("Segment", "Trigger"):
        from switchyard import triggers as _triggers

        return getattr(_triggers, name)

    if name in ("Halt", "crm_guard", "init_tenant_context", "tenant_guard"):
        from switchyard import middleware as _mw

        return getattr(_mw, name)

    if name == "Identity":
        from switchyard.identity import Identity

        return Identity

    if name == "TenantInfo":
        from switchyard.tenant.types import TenantInfo

        return TenantInfo

    if name == "tenant":
        import importlib

        return importlib.import_module("switchyard.tenant")

    if name in ("ConfigurationError", "SwitchyardError", "TenantContextError"):
        from switchyard import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
