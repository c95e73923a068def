"""
Entity: Actor Claims

Identidade de quem chama um caso de uso, já resolvida pela camada
de autenticação (claims do token).
"""

from dataclasses import dataclass, field
from typing import Iterable

DEFAULT_ADMIN_ROLES = ("admin", "system-admin")


@dataclass(frozen=True)
class ActorClaims:
    user_id: str | None = None
    is_authenticated: bool = False
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def anonymous(cls) -> "ActorClaims":
        return cls()

    @classmethod
    def user(cls, user_id: str, roles: Iterable[str] = ()) -> "ActorClaims":
        return cls(user_id=user_id, is_authenticated=True, roles=frozenset(roles))

    @property
    def authenticated(self) -> bool:
        return self.is_authenticated and bool(self.user_id)

    def has_any_role(self, roles: Iterable[str]) -> bool:
        wanted = {r.lower() for r in roles}
        return any(r.lower() in wanted for r in self.roles)
