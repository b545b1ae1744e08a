from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller extracted from a validated bearer token.

    user_id is the identity-service account id (JWT `sub`); it is the
    external user id a Student is linked to.
    """

    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def external_user_id(self) -> UUID | None:
        """Parse the subject as a UUID, or None when it is not one."""
        try:
            return UUID(self.user_id)
        except ValueError:
            return None
