# tests/test_policy.py
"""Tests for the authorization policy."""

import logging

import pytest

from threadline.core.claims import Actor
from threadline.core.enums import ContentStatus, Role
from threadline.core.errors import Forbidden
from threadline.core.policy import (
    REASON_NOT_OWNER,
    REASON_ROLE,
    OwnershipRequirement,
    RoleRequirement,
    authorize,
    can_read,
    require,
)

USER = Actor(id=1, role=Role.USER)
OTHER = Actor(id=2, role=Role.USER)
ADMIN = Actor(id=3, role=Role.ADMIN)


class TestOwnership:
    def test_owner_is_allowed(self):
        assert authorize(USER, OwnershipRequirement.of(USER.id))

    def test_admin_is_allowed_on_foreign_resource(self):
        assert authorize(ADMIN, OwnershipRequirement.of(USER.id))

    def test_other_user_is_denied(self):
        decision = authorize(OTHER, OwnershipRequirement.of(USER.id))
        assert not decision
        assert decision.reason == REASON_NOT_OWNER

    def test_missing_owner_denies_non_admin(self):
        assert not authorize(USER, OwnershipRequirement.of(None))

    def test_extra_roles_replace_the_default(self):
        requirement = OwnershipRequirement.of(USER.id, Role.USER)
        assert authorize(OTHER, requirement)

    @pytest.mark.parametrize(
        ("actor", "owner_id", "expected"),
        [
            (USER, 1, True),
            (USER, 2, False),
            (OTHER, 1, False),
            (ADMIN, 1, True),
            (ADMIN, 3, True),
        ],
    )
    def test_rule_holds_for_every_combination(self, actor, owner_id, expected):
        allowed = bool(authorize(actor, OwnershipRequirement.of(owner_id)))
        assert allowed is (actor.role is Role.ADMIN or actor.id == owner_id)
        assert allowed is expected


class TestRole:
    def test_admin_only(self):
        assert authorize(ADMIN, RoleRequirement.of(Role.ADMIN))
        decision = authorize(USER, RoleRequirement.of(Role.ADMIN))
        assert not decision
        assert decision.reason == REASON_ROLE

    def test_default_requirement_is_admin(self):
        assert not authorize(USER, RoleRequirement())
        assert authorize(ADMIN, RoleRequirement())


class TestRequire:
    def test_passes_silently(self):
        require(USER, OwnershipRequirement.of(USER.id))

    def test_raises_forbidden_with_reason(self, caplog):
        caplog.set_level(logging.INFO, logger="threadline.core.policy")
        with pytest.raises(Forbidden) as excinfo:
            require(OTHER, OwnershipRequirement.of(USER.id), action="update comment")
        assert excinfo.value.reason == REASON_NOT_OWNER
        assert excinfo.value.detail == "Forbidden: not-owner"
        assert "update comment" in caplog.text


class TestCanRead:
    def test_active_is_public(self):
        assert can_read(OTHER, USER.id, ContentStatus.ACTIVE)

    def test_inactive_visible_to_owner_and_admin_only(self):
        assert can_read(USER, USER.id, ContentStatus.INACTIVE)
        assert can_read(ADMIN, USER.id, ContentStatus.INACTIVE)
        assert not can_read(OTHER, USER.id, ContentStatus.INACTIVE)

    def test_accepts_raw_status_strings(self):
        assert not can_read(OTHER, USER.id, "INACTIVE")
