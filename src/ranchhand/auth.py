"""Actors and capability checks.

Identity itself comes from the external identity provider; this module only
turns a (id, name, role) triple into the set of things that actor may do.
"""

from dataclasses import dataclass
from enum import Enum

from .errors import PermissionDeniedError


class Capability(str, Enum):
    VIEW = "view"
    EDIT_RECORDS = "edit records"  # orders, quotes, todos, pins
    MANAGE_FUND = "manage the ranch fund"
    MANAGE_CATALOG = "manage the price catalog"
    MANAGE_ALL = "manage records created by others"


ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    "admin": frozenset(Capability),
    "member": frozenset({Capability.VIEW, Capability.EDIT_RECORDS, Capability.MANAGE_FUND}),
    "guest": frozenset({Capability.VIEW}),
}


@dataclass(frozen=True)
class Actor:
    """The user performing an operation."""

    id: str
    name: str
    role: str = "guest"

    @property
    def capabilities(self) -> frozenset[Capability]:
        return ROLE_CAPABILITIES.get(self.role, frozenset())

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities


SYSTEM_ACTOR = Actor(id="system", name="System", role="admin")


def require(actor: Actor, capability: Capability) -> None:
    """
    Check that an actor holds a capability.

    Raises:
        PermissionDeniedError: If the capability is missing.
    """
    if not actor.can(capability):
        raise PermissionDeniedError(actor.name, capability.value)


def require_owner_or(actor: Actor, owner_id: str | None, capability: Capability) -> None:
    """Allow the record's creator, or anyone holding the given capability."""
    if owner_id is not None and owner_id == actor.id and actor.can(Capability.EDIT_RECORDS):
        return
    require(actor, capability)
