"""
Persistence layer for jokes, submissions and ratings.

`JokeDatastore` is the protocol the core depends on; `SqlAlchemyJokeDatastore` is the
PostgreSQL (asyncpg) implementation, also exercised against sqlite+aiosqlite in tests.
Every method returns DTOs, never live ORM instances.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Protocol, Union

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poor_jokes.core.exceptions import DatastoreUnavailableError, SubmissionConflictError
from poor_jokes.models import JokeORM, JokeRatingORM, JokeSubmissionORM
from poor_jokes.models.dtos import JokeDTO, JokeRatingDTO, SubmissionDTO, SubmissionStatus
from poor_jokes.utils.db_session import get_db_session_context_manager

logger = logging.getLogger(__name__)

StatusLike = Union[SubmissionStatus, str]


class JokeDatastore(Protocol):
    """Operations the moderation core needs from storage. All methods are coroutines."""

    async def list_active_jokes(self) -> List[JokeDTO]: ...

    async def list_pending_submissions(self) -> List[SubmissionDTO]: ...

    async def list_submissions(self, status: Optional[StatusLike] = None) -> List[SubmissionDTO]: ...

    async def list_all_jokes(self) -> List[JokeDTO]: ...

    async def list_all_submissions(self) -> List[SubmissionDTO]: ...

    async def get_submission(self, submission_id: uuid.UUID) -> Optional[SubmissionDTO]: ...

    async def create_submission(self, content: str, submitted_by: str) -> SubmissionDTO: ...

    async def update_submission_status(
        self, submission_id: uuid.UUID, expected_status: StatusLike, fields: Dict[str, Any]
    ) -> SubmissionDTO: ...

    async def create_joke(self, content: str) -> JokeDTO: ...

    async def get_joke(self, joke_id: uuid.UUID) -> Optional[JokeDTO]: ...

    async def deactivate_joke(self, joke_id: uuid.UUID) -> Optional[JokeDTO]: ...

    async def delete_jokes(self, joke_ids: Iterable[uuid.UUID]) -> int: ...

    async def delete_submissions(self, submission_ids: Iterable[uuid.UUID]) -> int: ...

    async def get_rating(self, joke_id: uuid.UUID, user_id: str) -> Optional[JokeRatingDTO]: ...

    async def add_rating(self, joke_id: uuid.UUID, user_id: str, rating: int) -> JokeRatingDTO: ...

    async def update_rating(self, rating_id: uuid.UUID, rating: int) -> JokeRatingDTO: ...

    async def delete_rating(self, rating_id: uuid.UUID) -> None: ...

    def transaction(self) -> Any: ...


def _status_value(status: StatusLike) -> str:
    return SubmissionStatus(status).value


def _vote_columns():
    up_votes = func.coalesce(func.sum(case((JokeRatingORM.rating == 1, 1), else_=0)), 0)
    down_votes = func.coalesce(func.sum(case((JokeRatingORM.rating == -1, 1), else_=0)), 0)
    return up_votes.label("up_votes"), down_votes.label("down_votes")


def build_joke_dto(joke: JokeORM, up_votes: int = 0, down_votes: int = 0) -> JokeDTO:
    """Build a JokeDTO with derived vote statistics."""
    up_votes = int(up_votes or 0)
    down_votes = int(down_votes or 0)
    total_votes = up_votes + down_votes
    return JokeDTO(
        id=joke.id,
        content=joke.content,
        created_at=joke.created_at,
        is_active=joke.is_active,
        up_votes=up_votes,
        down_votes=down_votes,
        total_votes=total_votes,
        rating_percentage=round(up_votes / total_votes * 100) if total_votes else 0,
    )


class SqlAlchemyJokeDatastore:
    """
    JokeDatastore backed by an async SQLAlchemy session factory.

    Outside a transaction every call runs in its own short-lived session that commits on
    success. Inside `transaction()` calls share one session and commit together.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        bound_session: Optional[AsyncSession] = None,
    ):
        self._session_factory = session_factory
        self._bound_session = bound_session

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with get_db_session_context_manager(
                existing_session=self._bound_session, factory=self._session_factory
            ) as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database error during {operation}: {e}", exc_info=True)
            raise DatastoreUnavailableError(f"Datastore unavailable during {operation}") from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SqlAlchemyJokeDatastore"]:
        """
        Yield a datastore bound to a single session; everything done through it commits
        on normal exit and rolls back if the block raises.
        """
        if self._bound_session is not None:
            yield self
            return

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield SqlAlchemyJokeDatastore(self._session_factory, bound_session=session)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database error in transaction: {e}", exc_info=True)
            raise DatastoreUnavailableError("Datastore transaction failed") from e

    # --- Jokes -----------------------------------------------------------------

    async def _list_jokes(self, active_only: bool, newest_first: bool) -> List[JokeDTO]:
        up_votes, down_votes = _vote_columns()
        stmt = (
            select(JokeORM, up_votes, down_votes)
            .outerjoin(JokeRatingORM, JokeRatingORM.joke_id == JokeORM.id)
            .group_by(JokeORM.id)
            .order_by(JokeORM.created_at.desc() if newest_first else JokeORM.created_at.asc())
        )
        if active_only:
            stmt = stmt.where(JokeORM.is_active.is_(True))

        async with self._session("list jokes") as session:
            result = await session.execute(stmt)
            return [build_joke_dto(joke, up, down) for joke, up, down in result.all()]

    async def list_active_jokes(self) -> List[JokeDTO]:
        """Active jokes, newest first, with vote statistics."""
        return await self._list_jokes(active_only=True, newest_first=True)

    async def list_all_jokes(self) -> List[JokeDTO]:
        """Every joke including inactive ones, oldest first."""
        return await self._list_jokes(active_only=False, newest_first=False)

    async def get_joke(self, joke_id: uuid.UUID) -> Optional[JokeDTO]:
        async with self._session("get joke") as session:
            joke = await session.get(JokeORM, joke_id)
            return build_joke_dto(joke) if joke is not None else None

    async def create_joke(self, content: str) -> JokeDTO:
        async with self._session("create joke") as session:
            joke = JokeORM(content=content, is_active=True, created_at=datetime.now(timezone.utc))
            session.add(joke)
            await session.flush()
            logger.info(f"Created joke {joke.id}")
            return build_joke_dto(joke)

    async def deactivate_joke(self, joke_id: uuid.UUID) -> Optional[JokeDTO]:
        """Soft-delete an active joke. Returns None when no active joke has that id."""
        async with self._session("deactivate joke") as session:
            result = await session.execute(
                update(JokeORM)
                .where(JokeORM.id == joke_id, JokeORM.is_active.is_(True))
                .values(is_active=False)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None
            joke = await session.get(JokeORM, joke_id, populate_existing=True)
            return build_joke_dto(joke)

    async def delete_jokes(self, joke_ids: Iterable[uuid.UUID]) -> int:
        ids = list(joke_ids)
        if not ids:
            return 0
        async with self._session("delete jokes") as session:
            # Bulk deletes bypass ORM cascades; ratings go first.
            await session.execute(delete(JokeRatingORM).where(JokeRatingORM.joke_id.in_(ids)))
            result = await session.execute(delete(JokeORM).where(JokeORM.id.in_(ids)))
            return result.rowcount

    # --- Submissions -----------------------------------------------------------

    async def list_submissions(self, status: Optional[StatusLike] = None) -> List[SubmissionDTO]:
        """Submissions newest first, optionally filtered by status."""
        stmt = select(JokeSubmissionORM).order_by(JokeSubmissionORM.created_at.desc())
        if status is not None:
            stmt = stmt.where(JokeSubmissionORM.status == _status_value(status))
        async with self._session("list submissions") as session:
            result = await session.execute(stmt)
            return [SubmissionDTO.model_validate(row) for row in result.scalars().all()]

    async def list_pending_submissions(self) -> List[SubmissionDTO]:
        return await self.list_submissions(SubmissionStatus.PENDING)

    async def list_all_submissions(self) -> List[SubmissionDTO]:
        """Every submission, oldest first."""
        stmt = select(JokeSubmissionORM).order_by(JokeSubmissionORM.created_at.asc())
        async with self._session("list all submissions") as session:
            result = await session.execute(stmt)
            return [SubmissionDTO.model_validate(row) for row in result.scalars().all()]

    async def get_submission(self, submission_id: uuid.UUID) -> Optional[SubmissionDTO]:
        async with self._session("get submission") as session:
            row = await session.get(JokeSubmissionORM, submission_id)
            return SubmissionDTO.model_validate(row) if row is not None else None

    async def create_submission(self, content: str, submitted_by: str) -> SubmissionDTO:
        async with self._session("create submission") as session:
            row = JokeSubmissionORM(
                content=content,
                submitted_by=submitted_by,
                status=SubmissionStatus.PENDING.value,
                created_at=datetime.now(timezone.utc),
            )
            session.add(row)
            await session.flush()
            return SubmissionDTO.model_validate(row)

    async def update_submission_status(
        self,
        submission_id: uuid.UUID,
        expected_status: StatusLike,
        fields: Dict[str, Any],
    ) -> SubmissionDTO:
        """
        Conditionally update a submission: the row is only written if its status is still
        `expected_status`.

        Raises:
            SubmissionConflictError: no row matched (missing, or already transitioned).
        """
        values = dict(fields)
        if "status" in values:
            values["status"] = _status_value(values["status"])
        expected = _status_value(expected_status)

        async with self._session("update submission status") as session:
            result = await session.execute(
                update(JokeSubmissionORM)
                .where(JokeSubmissionORM.id == submission_id, JokeSubmissionORM.status == expected)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise SubmissionConflictError(submission_id, expected)
            row = await session.get(JokeSubmissionORM, submission_id, populate_existing=True)
            return SubmissionDTO.model_validate(row)

    async def delete_submissions(self, submission_ids: Iterable[uuid.UUID]) -> int:
        ids = list(submission_ids)
        if not ids:
            return 0
        async with self._session("delete submissions") as session:
            result = await session.execute(delete(JokeSubmissionORM).where(JokeSubmissionORM.id.in_(ids)))
            return result.rowcount

    # --- Ratings ---------------------------------------------------------------

    async def get_rating(self, joke_id: uuid.UUID, user_id: str) -> Optional[JokeRatingDTO]:
        stmt = select(JokeRatingORM).where(
            JokeRatingORM.joke_id == joke_id, JokeRatingORM.user_id == user_id
        )
        async with self._session("get rating") as session:
            row = (await session.execute(stmt)).scalars().first()
            return JokeRatingDTO.model_validate(row) if row is not None else None

    async def add_rating(self, joke_id: uuid.UUID, user_id: str, rating: int) -> JokeRatingDTO:
        async with self._session("add rating") as session:
            row = JokeRatingORM(
                joke_id=joke_id,
                user_id=user_id,
                rating=rating,
                created_at=datetime.now(timezone.utc),
            )
            session.add(row)
            await session.flush()
            return JokeRatingDTO.model_validate(row)

    async def update_rating(self, rating_id: uuid.UUID, rating: int) -> JokeRatingDTO:
        async with self._session("update rating") as session:
            row = await session.get(JokeRatingORM, rating_id)
            if row is None:
                raise DatastoreUnavailableError(f"Rating {rating_id} disappeared during update")
            row.rating = rating
            row.updated_at = datetime.now(timezone.utc)
            await session.flush()
            return JokeRatingDTO.model_validate(row)

    async def delete_rating(self, rating_id: uuid.UUID) -> None:
        async with self._session("delete rating") as session:
            await session.execute(delete(JokeRatingORM).where(JokeRatingORM.id == rating_id))
