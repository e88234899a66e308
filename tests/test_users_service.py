# tests/test_users_service.py
"""Tests for account flows: registration, login, reset and administration."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select

from threadline.core import security
from threadline.core.claims import ClaimVerifier
from threadline.core.enums import Role, UserStatus
from threadline.core.errors import Forbidden, InvalidInput, NotFound, Unauthenticated
from threadline.models import Comment, PasswordReset, Post, Reaction, User
from threadline.services import users as user_service
from threadline.services.mailer import LogMailer
from threadline.services.reactions import ReactionTarget, ReactionToggleEngine

from .conftest import TEST_PASSWORD, actor_for


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


class TestRegisterAndLogin:
    def test_register_always_creates_users(self, db_session):
        user = user_service.register(
            db_session,
            login="carol",
            email="carol@example.com",
            full_name="Carol Doe",
            password=TEST_PASSWORD,
        )
        assert user.role is Role.USER
        assert user.status is UserStatus.ACTIVE
        assert user.password_hash != TEST_PASSWORD
        assert security.verify_password(TEST_PASSWORD, user.password_hash)

    def test_duplicate_login(self, db_session, test_user):
        with pytest.raises(InvalidInput, match="User already exists"):
            user_service.register(
                db_session,
                login=test_user.login,
                email="new@example.com",
                full_name="Someone",
                password=TEST_PASSWORD,
            )

    def test_duplicate_email(self, db_session, test_user):
        with pytest.raises(InvalidInput, match="Email already in use"):
            user_service.register(
                db_session,
                login="fresh",
                email=test_user.email,
                full_name="Someone",
                password=TEST_PASSWORD,
            )

    @pytest.mark.parametrize("field", ["login", "email"])
    def test_login_by_login_or_email(self, db_session, test_user, field):
        result = user_service.authenticate(db_session, getattr(test_user, field), TEST_PASSWORD)
        actor = ClaimVerifier.from_settings().verify(result.token)
        assert actor.id == test_user.id
        assert actor.role is Role.USER

    def test_email_lookup_ignores_case(self, db_session, test_user):
        result = user_service.authenticate(db_session, test_user.email.upper(), TEST_PASSWORD)
        assert result.user.id == test_user.id

    def test_duplicate_email_in_other_case(self, db_session, test_user):
        with pytest.raises(InvalidInput, match="Email already in use"):
            user_service.register(
                db_session,
                login="fresh",
                email=test_user.email.upper(),
                full_name="Someone",
                password=TEST_PASSWORD,
            )

    def test_wrong_password(self, db_session, test_user):
        with pytest.raises(Unauthenticated):
            user_service.authenticate(db_session, test_user.login, "Wrong-pass1")

    def test_unknown_user(self, db_session):
        with pytest.raises(Unauthenticated):
            user_service.authenticate(db_session, "ghost", TEST_PASSWORD)

    def test_inactive_account(self, db_session, make_user):
        pending = make_user("pending", status=UserStatus.PENDING)
        with pytest.raises(Forbidden):
            user_service.authenticate(db_session, pending.login, TEST_PASSWORD)


class TestAdministration:
    def test_admin_creates_admin(self, db_session, admin_user):
        user = user_service.create_user(
            db_session,
            actor_for(admin_user),
            login="second",
            email="second@example.com",
            full_name="Second Admin",
            password=TEST_PASSWORD,
            role=Role.ADMIN,
        )
        assert user.role is Role.ADMIN

    def test_user_cannot_create_accounts(self, db_session, test_user):
        with pytest.raises(Forbidden):
            user_service.create_user(
                db_session,
                actor_for(test_user),
                login="x",
                email="x@example.com",
                full_name="Xavier",
                password=TEST_PASSWORD,
            )

    def test_change_role(self, db_session, admin_user, test_user):
        updated = user_service.change_role(db_session, actor_for(admin_user), test_user.id, Role.ADMIN)
        assert updated.role is Role.ADMIN

    def test_change_role_missing_user(self, db_session, admin_user):
        with pytest.raises(NotFound):
            user_service.change_role(db_session, actor_for(admin_user), 999, Role.ADMIN)

    def test_change_role_requires_admin(self, db_session, test_user, other_user):
        with pytest.raises(Forbidden):
            user_service.change_role(db_session, actor_for(test_user), other_user.id, Role.ADMIN)

    def test_update_profile(self, db_session, test_user, other_user):
        updated = user_service.update_profile(
            db_session, actor_for(test_user), full_name="Alice Liddell"
        )
        assert updated.full_name == "Alice Liddell"
        with pytest.raises(InvalidInput):
            user_service.update_profile(db_session, actor_for(test_user), email=other_user.email)
        with pytest.raises(InvalidInput):
            user_service.update_profile(db_session, actor_for(test_user))

    def test_delete_user_cascades(
        self, db_session, admin_user, test_user, other_user, make_post, make_comment
    ):
        own_post = make_post(test_user)
        make_comment(other_user, own_post)
        foreign_post = make_post(other_user)
        root = make_comment(other_user, foreign_post)
        mine = make_comment(test_user, foreign_post, parent=root)
        reply = make_comment(other_user, foreign_post, parent=mine)
        engine = ReactionToggleEngine()
        engine.toggle(db_session, actor_for(test_user), ReactionTarget.post(foreign_post.id), "LIKE")
        engine.toggle(db_session, actor_for(other_user), ReactionTarget.comment(mine.id), "LIKE")
        engine.toggle(db_session, actor_for(other_user), ReactionTarget.post(own_post.id), "LIKE")

        user_service.delete_user(db_session, actor_for(admin_user), test_user.id)

        assert db_session.get(User, test_user.id) is None
        assert [p.id for p in db_session.execute(select(Post)).scalars()] == [foreign_post.id]
        remaining = {c.id for c in db_session.execute(select(Comment)).scalars()}
        assert remaining == {root.id, reply.id}
        db_session.refresh(reply)
        assert reply.parent_comment_id == root.id
        assert _count(db_session, Reaction) == 0


class TestPasswordReset:
    def test_request_and_confirm(self, db_session, test_user):
        mailer = LogMailer()
        assert user_service.request_password_reset(db_session, mailer, test_user.email)

        reset = db_session.execute(select(PasswordReset)).scalars().one()
        assert reset.token in mailer.outbox[0].get_content()

        user_service.confirm_password_reset(db_session, reset.token, "Brand-new1")

        db_session.refresh(test_user)
        assert security.verify_password("Brand-new1", test_user.password_hash)
        assert _count(db_session, PasswordReset) == 0

    def test_unknown_email(self, db_session):
        with pytest.raises(NotFound):
            user_service.request_password_reset(db_session, LogMailer(), "nobody@example.com")

    def test_mail_failure_discards_token(self, db_session, test_user, mocker):
        mailer = mocker.Mock()
        mailer.send.return_value = False

        assert not user_service.request_password_reset(db_session, mailer, test_user.email)
        assert _count(db_session, PasswordReset) == 0

    def test_expired_token(self, db_session, test_user):
        db_session.add(
            PasswordReset(
                user_id=test_user.id,
                token="stale",
                expires_at=datetime.now(UTC) - timedelta(minutes=1),
            )
        )
        db_session.commit()
        with pytest.raises(InvalidInput, match="Invalid or expired token"):
            user_service.confirm_password_reset(db_session, "stale", "Brand-new1")

    def test_unknown_token(self, db_session):
        with pytest.raises(InvalidInput):
            user_service.confirm_password_reset(db_session, "nope", "Brand-new1")
