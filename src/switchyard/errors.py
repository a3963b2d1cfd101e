"""Switchyard exception hierarchy.

Only build-time and programming errors are exceptions. Routing outcomes
(not found, forbidden, bad request) are ordinary results returned by the
dispatcher, so handlers never see them raised.
"""


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when a route table or pattern is invalid.

    Typically raised by ``Routes.compile()`` at startup.
    """


class TenantContextError(SwitchyardError, LookupError):
    """Raised by ``tenant.current()`` when no tenant is bound."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            detail
            or (
                "Tenant context not initialized. Add init_tenant_context to the "
                "global middleware, or use tenant.run() for non-HTTP triggers."
            )
        )
