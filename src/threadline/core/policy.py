"""Authorization policy.

A single pure decision function answers "may this actor do this?" for every
resource type. Two requirement shapes cover the whole API:

- :class:`RoleRequirement`: the actor's role must be in ``any_of``
  (category management, user administration).
- :class:`OwnershipRequirement`: the actor owns the resource, or holds a
  role in ``any_of`` ("author or ADMIN" for posts and comments).

Existence is never decided here. Orchestrators resolve the resource first and
raise ``NotFound`` before asking for a decision, so every endpoint reports
absence and denial in the same order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from threadline.core.claims import Actor
from threadline.core.enums import ContentStatus, Role
from threadline.core.errors import Forbidden

logger = logging.getLogger(__name__)

REASON_ROLE = "role"
REASON_NOT_OWNER = "not-owner"

_ADMIN_ONLY = frozenset({Role.ADMIN})


def _roles(values: Iterable[Role | str]) -> frozenset[Role]:
    return frozenset(Role(value) for value in values)


@dataclass(frozen=True)
class RoleRequirement:
    """Allow actors whose role is one of ``any_of``."""

    any_of: frozenset[Role] = _ADMIN_ONLY

    @classmethod
    def of(cls, *roles: Role | str) -> RoleRequirement:
        return cls(any_of=_roles(roles))


@dataclass(frozen=True)
class OwnershipRequirement:
    """Allow the owner of a resource, or actors whose role is one of ``any_of``."""

    owner_id: int | None
    any_of: frozenset[Role] = field(default=_ADMIN_ONLY)

    @classmethod
    def of(cls, owner_id: int | None, *roles: Role | str) -> OwnershipRequirement:
        return cls(owner_id=owner_id, any_of=_roles(roles) if roles else _ADMIN_ONLY)


Requirement = RoleRequirement | OwnershipRequirement


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = Decision(allowed=True)


def authorize(actor: Actor, requirement: Requirement) -> Decision:
    """Decide whether ``actor`` satisfies ``requirement``.

    Args:
        actor: Verified identity of the caller
        requirement: Role or ownership-or-role requirement

    Returns:
        ``ALLOWED``, or a denied decision carrying ``role`` or ``not-owner``
    """
    if actor.role in requirement.any_of:
        return ALLOWED

    if isinstance(requirement, OwnershipRequirement):
        if requirement.owner_id is not None and actor.id == requirement.owner_id:
            return ALLOWED
        return Decision(allowed=False, reason=REASON_NOT_OWNER)

    return Decision(allowed=False, reason=REASON_ROLE)


def require(actor: Actor, requirement: Requirement, *, action: str | None = None) -> None:
    """Raise :class:`Forbidden` unless ``actor`` satisfies ``requirement``.

    Args:
        actor: Verified identity of the caller
        requirement: Requirement to enforce
        action: Optional label used in the log line for denied attempts
    """
    decision = authorize(actor, requirement)
    if decision.allowed:
        return
    logger.info(
        "Denied %s for actor=%s role=%s reason=%s",
        action or "action",
        actor.id,
        actor.role.value,
        decision.reason,
    )
    raise Forbidden(decision.reason or REASON_ROLE)


def can_read(actor: Actor, owner_id: int | None, status: ContentStatus | str) -> bool:
    """Return True if ``actor`` may see a resource in ``status`` owned by ``owner_id``.

    ACTIVE resources are visible to everyone, INACTIVE ones only to their
    owner, and ADMIN sees everything.
    """
    if actor.is_admin:
        return True
    if ContentStatus(status) is ContentStatus.ACTIVE:
        return True
    return owner_id is not None and owner_id == actor.id
