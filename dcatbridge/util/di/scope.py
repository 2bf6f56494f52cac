"""Custom Dishka scopes for dcat-bridge."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Process lifetime (HTTP client pool, token cache)
    - UOW: One catalog export (an HTTP request or a CLI run)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
