"""Reaction toggle engine.

Keeps the invariant "at most one reaction per (actor, target)" while actors
create, flip and remove LIKE/DISLIKE signals on posts and comments.

``toggle`` is a single read-modify-write:

- no reaction yet            -> create it              (``CREATED``)
- same kind already present  -> delete it              (``REMOVED``)
- other kind present         -> overwrite it in place  (``UPDATED``)

The read and the write for one ``(actor, target kind, target id)`` key run
under a per-key lock and commit before the lock is released, so concurrent
toggles by the same actor on the same target serialize inside this process.
The unique constraint on ``reaction`` catches races with other processes;
those surface as :class:`Conflict` and are retried by the caller, never here.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from threading import Lock

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from threadline.core.claims import Actor
from threadline.core.enums import ContentStatus, ReactionKind, TargetKind
from threadline.core.errors import Conflict, NotFound, TargetUnavailable
from threadline.models import Comment, Post, Reaction

logger = logging.getLogger(__name__)


class KeyedLock:
    """Registry of mutexes keyed by arbitrary hashable values.

    Entries are reference counted and dropped as soon as nobody holds or waits
    for them, so the registry only grows with the number of in-flight keys.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._entries: dict[Hashable, list] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, [Lock(), 0])
            entry[1] += 1
        lock: Lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


# Shared by every engine instance in the process.
_KEY_LOCKS = KeyedLock()


@dataclass(frozen=True)
class ReactionTarget:
    """A post or a comment addressed as (kind, id)."""

    kind: TargetKind
    id: int

    @classmethod
    def post(cls, post_id: int) -> ReactionTarget:
        return cls(TargetKind.POST, post_id)

    @classmethod
    def comment(cls, comment_id: int) -> ReactionTarget:
        return cls(TargetKind.COMMENT, comment_id)

    @property
    def label(self) -> str:
        return self.kind.value.lower()


class ToggleAction(str, Enum):
    """Which transition a toggle performed."""

    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass(frozen=True)
class ToggleOutcome:
    """Result of one toggle.

    ``kind`` is the kind now stored (``CREATED``/``UPDATED``) or the kind that
    was removed (``REMOVED``). ``reaction`` is None after a removal.
    """

    action: ToggleAction
    kind: ReactionKind
    previous_kind: ReactionKind | None = None
    reaction: Reaction | None = None


@dataclass(frozen=True)
class ReactionSummary:
    """Reaction counts for one target."""

    likes: int = 0
    dislikes: int = 0

    @property
    def total(self) -> int:
        return self.likes + self.dislikes


class ReactionToggleEngine:
    """Create, flip and remove reactions while keeping one per (actor, target)."""

    def __init__(self, locks: KeyedLock | None = None) -> None:
        self._locks = locks or _KEY_LOCKS

    # --- lookups ------------------------------------------------------------------
    @staticmethod
    def _load_target(session: Session, target: ReactionTarget) -> Post | Comment | None:
        model = Post if target.kind is TargetKind.POST else Comment
        return session.get(model, target.id)

    def ensure_interactive(self, session: Session, target: ReactionTarget) -> Post | Comment:
        """Return the target row if it exists and is ACTIVE.

        Raises:
            TargetUnavailable: If the target is missing or not ACTIVE
        """
        row = self._load_target(session, target)
        if row is None:
            raise TargetUnavailable(
                TargetUnavailable.MISSING,
                f"{target.label.capitalize()} not found",
            )
        if row.status != ContentStatus.ACTIVE:
            raise TargetUnavailable(
                TargetUnavailable.INACTIVE,
                f"Cannot react to an inactive {target.label}",
            )
        return row

    @staticmethod
    def find(session: Session, actor_id: int, target: ReactionTarget) -> Reaction | None:
        """Return the reaction ``actor_id`` left on ``target``, if any."""
        result = session.execute(
            select(Reaction).where(
                Reaction.author_id == actor_id,
                Reaction.target_kind == target.kind,
                Reaction.target_id == target.id,
            )
        )
        return result.scalars().first()

    # --- transitions --------------------------------------------------------------
    def toggle(
        self,
        session: Session,
        actor: Actor,
        target: ReactionTarget,
        requested_kind: ReactionKind | str,
    ) -> ToggleOutcome:
        """Apply ``requested_kind`` for ``actor`` on ``target`` and commit.

        Args:
            session: Session the read and the write run in
            actor: Verified identity of the caller
            target: Post or comment being reacted to
            requested_kind: LIKE or DISLIKE (case-insensitive)

        Returns:
            The transition that was applied

        Raises:
            InvalidKind: If ``requested_kind`` is not LIKE or DISLIKE
            TargetUnavailable: If the target is missing or inactive
            Conflict: If a concurrent writer created the row first
        """
        kind = ReactionKind.parse(requested_kind)
        self.ensure_interactive(session, target)

        with self._locks.hold((actor.id, target.kind, target.id)):
            try:
                outcome = self._apply(session, actor, target, kind)
                session.commit()
            except IntegrityError as err:
                session.rollback()
                logger.warning(
                    "Reaction race on actor=%s %s=%s",
                    actor.id,
                    target.label,
                    target.id,
                )
                raise Conflict("Reaction was modified concurrently; retry the request") from err

        logger.debug(
            "Reaction %s by actor=%s on %s=%s: %s",
            outcome.action.value,
            actor.id,
            target.label,
            target.id,
            outcome.kind.value,
        )
        return outcome

    def _apply(
        self,
        session: Session,
        actor: Actor,
        target: ReactionTarget,
        kind: ReactionKind,
    ) -> ToggleOutcome:
        existing = self.find(session, actor.id, target)

        if existing is None:
            reaction = Reaction(
                author_id=actor.id,
                target_kind=target.kind,
                target_id=target.id,
                kind=kind,
            )
            session.add(reaction)
            session.flush()
            return ToggleOutcome(ToggleAction.CREATED, kind, reaction=reaction)

        if existing.kind == kind:
            session.delete(existing)
            session.flush()
            return ToggleOutcome(ToggleAction.REMOVED, kind, previous_kind=kind)

        previous = existing.kind
        existing.kind = kind
        session.flush()
        return ToggleOutcome(
            ToggleAction.UPDATED,
            kind,
            previous_kind=previous,
            reaction=existing,
        )

    def withdraw(
        self,
        session: Session,
        actor: Actor,
        target: ReactionTarget,
        kind: ReactionKind | str,
    ) -> ReactionKind:
        """Remove the actor's reaction on ``target`` only if it has ``kind``.

        Raises:
            InvalidKind: If ``kind`` is not LIKE or DISLIKE
            NotFound: If the actor has no reaction of that kind on the target
        """
        kind = ReactionKind.parse(kind)
        with self._locks.hold((actor.id, target.kind, target.id)):
            existing = self.find(session, actor.id, target)
            if existing is None or existing.kind != kind:
                raise NotFound(f"{kind.value} not found for the specified {target.label}")
            session.delete(existing)
            session.commit()
        return kind

    # --- reads --------------------------------------------------------------------
    @staticmethod
    def list_reactions(
        session: Session,
        target: ReactionTarget,
        *,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Reaction], int]:
        """Return one page of reactions on ``target`` (newest first) and the total."""
        condition = (Reaction.target_kind == target.kind, Reaction.target_id == target.id)
        total = session.execute(
            select(func.count()).select_from(Reaction).where(*condition)
        ).scalar_one()
        rows = session.execute(
            select(Reaction).where(*condition).order_by(Reaction.id.desc()).offset(skip).limit(limit)
        )
        return list(rows.scalars()), int(total)

    @staticmethod
    def summarize(session: Session, target: ReactionTarget) -> ReactionSummary:
        """Return LIKE and DISLIKE counts for ``target``."""
        rows = session.execute(
            select(Reaction.kind, func.count())
            .where(Reaction.target_kind == target.kind, Reaction.target_id == target.id)
            .group_by(Reaction.kind)
        ).all()
        counts = {row[0]: int(row[1]) for row in rows}
        return ReactionSummary(
            likes=counts.get(ReactionKind.LIKE, 0),
            dislikes=counts.get(ReactionKind.DISLIKE, 0),
        )

    # --- cascades -----------------------------------------------------------------
    @staticmethod
    def purge_targets(session: Session, kind: TargetKind, target_ids: Iterable[int]) -> int:
        """Delete every reaction on the given targets without committing.

        Returns:
            Number of rows removed
        """
        ids = list(target_ids)
        if not ids:
            return 0
        result = session.execute(
            delete(Reaction)
            .where(Reaction.target_kind == kind, Reaction.target_id.in_(ids))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    @staticmethod
    def purge_by_author(session: Session, author_id: int) -> int:
        """Delete every reaction left by ``author_id`` without committing."""
        result = session.execute(
            delete(Reaction)
            .where(Reaction.author_id == author_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0


def get_reaction_engine() -> ReactionToggleEngine:
    """Return a toggle engine sharing the process-wide key locks."""
    return ReactionToggleEngine()
