"""
Viewer context - who is looking at the current request.

The restriction plugin only ever asks `is_authenticated`. Admin routes
additionally check capabilities.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from arc.auth.capabilities import Capability, Role, get_capabilities


@dataclass
class ViewerContext:
    """
    Authorization context for a request.

    Usage in routes:
        async def my_route(viewer: ViewerContext = Depends(get_viewer)):
            if viewer.is_anonymous:
                ...
    """

    user_id: str | None = None
    username: str | None = None
    display_name: str | None = None
    role: Role | None = None

    # Session token ID, so logout can revoke it
    session_id: str | None = None

    _capabilities: set[Capability] = field(default_factory=set, repr=False)

    def __post_init__(self):
        self._capabilities = get_capabilities(self.role)

    @property
    def is_authenticated(self) -> bool:
        """Is there a logged-in user?"""
        return self.user_id is not None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @property
    def capabilities(self) -> set[Capability]:
        return self._capabilities

    def can(self, capability: Capability | str) -> bool:
        if isinstance(capability, str):
            try:
                capability = Capability(capability)
            except ValueError:
                return False
        return capability in self._capabilities

    @classmethod
    def anonymous(cls) -> ViewerContext:
        """Create an anonymous context (no user)."""
        return cls()
