"""
Unit tests for the session context manager used by the SQL datastore.
"""

import uuid

import pytest
from sqlalchemy import select

from poor_jokes.models import JokeORM
from poor_jokes.utils import db_session
from poor_jokes.utils.db_session import build_session_factory, get_db_session_context_manager


class TestSessionContextManager:

    def test_only_context_manager_api_is_exposed(self):
        assert not hasattr(db_session, "get_db_session")

    async def test_commits_on_success(self, sqlite_engine):
        factory = build_session_factory(sqlite_engine)
        joke_id = uuid.uuid4()

        async with get_db_session_context_manager(factory=factory) as session:
            session.add(JokeORM(id=joke_id, content="Committed joke."))

        async with factory() as check:
            assert (await check.execute(select(JokeORM).where(JokeORM.id == joke_id))).scalar_one_or_none()

    async def test_rolls_back_on_error(self, sqlite_engine):
        factory = build_session_factory(sqlite_engine)
        joke_id = uuid.uuid4()

        with pytest.raises(RuntimeError):
            async with get_db_session_context_manager(factory=factory) as session:
                session.add(JokeORM(id=joke_id, content="Rolled back joke."))
                await session.flush()
                raise RuntimeError("boom")

        async with factory() as check:
            assert (await check.execute(select(JokeORM).where(JokeORM.id == joke_id))).scalar_one_or_none() is None

    async def test_existing_session_is_left_to_caller(self, sqlite_engine):
        factory = build_session_factory(sqlite_engine)
        async with factory() as outer:
            async with get_db_session_context_manager(existing_session=outer, factory=factory) as session:
                assert session is outer
                session.add(JokeORM(id=uuid.uuid4(), content="Uncommitted joke."))
            await outer.rollback()

        async with factory() as check:
            assert (await check.execute(select(JokeORM))).scalars().all() == []
