"""
In-memory JokeDatastore used by unit tests.

Every method yields to the event loop once so concurrent callers interleave the way
they would against a real database. `transaction()` serializes transactional writers and
undoes only the writes made inside the block if it raises.
"""

import asyncio
import contextvars
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from poor_jokes.core.exceptions import DatastoreUnavailableError, SubmissionConflictError
from poor_jokes.models.dtos import JokeDTO, JokeRatingDTO, SubmissionDTO, SubmissionStatus
from poor_jokes.storage.datastore import build_joke_dto

_MISSING = object()


class InMemoryJokeDatastore:

    def __init__(self):
        self.jokes: Dict[uuid.UUID, JokeDTO] = {}
        self.submissions: Dict[uuid.UUID, SubmissionDTO] = {}
        self.ratings: Dict[uuid.UUID, JokeRatingDTO] = {}
        self.failures: Dict[str, Exception] = {}
        self._tick = 0
        self._tx_lock = asyncio.Lock()
        self._undo_log: contextvars.ContextVar = contextvars.ContextVar("undo_log", default=None)

    # --- test helpers ------------------------------------------------------------

    def _now(self) -> datetime:
        self._tick += 1
        return datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=self._tick)

    def fail(self, method: str, exc: Optional[Exception] = None) -> None:
        self.failures[method] = exc or DatastoreUnavailableError(f"{method} failed")

    async def _enter(self, method: str) -> None:
        await asyncio.sleep(0)
        if method in self.failures:
            raise self.failures[method]

    def _write(self, store: dict, key, value) -> None:
        undo = self._undo_log.get()
        if undo is not None:
            undo.append((store, key, store.get(key, _MISSING)))
        if value is _MISSING:
            store.pop(key, None)
        else:
            store[key] = value

    def seed_joke(self, content: str, is_active: bool = True) -> JokeDTO:
        joke = JokeDTO(id=uuid.uuid4(), content=content, created_at=self._now(), is_active=is_active)
        self._write(self.jokes, joke.id, joke)
        return joke

    def seed_submission(self, content: str, status: SubmissionStatus = SubmissionStatus.PENDING,
                        submitted_by: str = "anonymous") -> SubmissionDTO:
        submission = SubmissionDTO(
            id=uuid.uuid4(), content=content, submitted_by=submitted_by,
            status=status, created_at=self._now(),
        )
        self._write(self.submissions, submission.id, submission)
        return submission

    # --- JokeDatastore -----------------------------------------------------------

    @asynccontextmanager
    async def transaction(self):
        if self._undo_log.get() is not None:
            yield self
            return
        async with self._tx_lock:
            undo: list = []
            token = self._undo_log.set(undo)
            try:
                yield self
            except BaseException:
                for store, key, previous in reversed(undo):
                    if previous is _MISSING:
                        store.pop(key, None)
                    else:
                        store[key] = previous
                raise
            finally:
                self._undo_log.reset(token)

    def _with_votes(self, joke: JokeDTO) -> JokeDTO:
        votes = [r.rating for r in self.ratings.values() if r.joke_id == joke.id]
        return build_joke_dto(joke, votes.count(1), votes.count(-1))

    async def list_active_jokes(self) -> List[JokeDTO]:
        await self._enter("list_active_jokes")
        jokes = [self._with_votes(j) for j in self.jokes.values() if j.is_active]
        return sorted(jokes, key=lambda j: j.created_at, reverse=True)

    async def list_all_jokes(self) -> List[JokeDTO]:
        await self._enter("list_all_jokes")
        return sorted((self._with_votes(j) for j in self.jokes.values()), key=lambda j: j.created_at)

    async def list_submissions(self, status=None) -> List[SubmissionDTO]:
        await self._enter("list_submissions")
        rows = [s for s in self.submissions.values() if status is None or s.status == SubmissionStatus(status)]
        return sorted(rows, key=lambda s: s.created_at, reverse=True)

    async def list_pending_submissions(self) -> List[SubmissionDTO]:
        await self._enter("list_pending_submissions")
        return await self.list_submissions(SubmissionStatus.PENDING)

    async def list_all_submissions(self) -> List[SubmissionDTO]:
        await self._enter("list_all_submissions")
        return sorted(self.submissions.values(), key=lambda s: s.created_at)

    async def get_submission(self, submission_id) -> Optional[SubmissionDTO]:
        await self._enter("get_submission")
        return self.submissions.get(submission_id)

    async def create_submission(self, content: str, submitted_by: str) -> SubmissionDTO:
        await self._enter("create_submission")
        return self.seed_submission(content, submitted_by=submitted_by)

    async def update_submission_status(self, submission_id, expected_status, fields: Dict[str, Any]) -> SubmissionDTO:
        await self._enter("update_submission_status")
        current = self.submissions.get(submission_id)
        expected = SubmissionStatus(expected_status)
        if current is None or current.status != expected:
            raise SubmissionConflictError(submission_id, expected.value)
        updated = current.model_copy(
            update={**fields, "status": SubmissionStatus(fields.get("status", current.status))}
        )
        self._write(self.submissions, submission_id, updated)
        return updated

    async def create_joke(self, content: str) -> JokeDTO:
        await self._enter("create_joke")
        return self.seed_joke(content)

    async def get_joke(self, joke_id) -> Optional[JokeDTO]:
        await self._enter("get_joke")
        joke = self.jokes.get(joke_id)
        return self._with_votes(joke) if joke else None

    async def deactivate_joke(self, joke_id) -> Optional[JokeDTO]:
        await self._enter("deactivate_joke")
        joke = self.jokes.get(joke_id)
        if joke is None or not joke.is_active:
            return None
        self._write(self.jokes, joke_id, joke.model_copy(update={"is_active": False}))
        return self.jokes[joke_id]

    async def delete_jokes(self, joke_ids: Iterable) -> int:
        await self._enter("delete_jokes")
        removed = 0
        for joke_id in list(joke_ids):
            if joke_id in self.jokes:
                self._write(self.jokes, joke_id, _MISSING)
                removed += 1
                for rating_id in [r.id for r in self.ratings.values() if r.joke_id == joke_id]:
                    self._write(self.ratings, rating_id, _MISSING)
        return removed

    async def delete_submissions(self, submission_ids: Iterable) -> int:
        await self._enter("delete_submissions")
        removed = 0
        for submission_id in list(submission_ids):
            if submission_id in self.submissions:
                self._write(self.submissions, submission_id, _MISSING)
                removed += 1
        return removed

    async def get_rating(self, joke_id, user_id: str) -> Optional[JokeRatingDTO]:
        await self._enter("get_rating")
        return next((r for r in self.ratings.values() if r.joke_id == joke_id and r.user_id == user_id), None)

    async def add_rating(self, joke_id, user_id: str, rating: int) -> JokeRatingDTO:
        await self._enter("add_rating")
        row = JokeRatingDTO(id=uuid.uuid4(), joke_id=joke_id, user_id=user_id, rating=rating, created_at=self._now())
        self._write(self.ratings, row.id, row)
        return row

    async def update_rating(self, rating_id, rating: int) -> JokeRatingDTO:
        await self._enter("update_rating")
        updated = self.ratings[rating_id].model_copy(update={"rating": rating, "updated_at": self._now()})
        self._write(self.ratings, rating_id, updated)
        return updated

    async def delete_rating(self, rating_id) -> None:
        await self._enter("delete_rating")
        self._write(self.ratings, rating_id, _MISSING)
