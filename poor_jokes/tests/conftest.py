import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from poor_jokes.core.duplicate_detector import DuplicateDetector
from poor_jokes.core.moderation_service import ModerationService
from poor_jokes.integrations.dispatcher import NotificationDispatcher
from poor_jokes.models.base import Base
from poor_jokes.storage.datastore import SqlAlchemyJokeDatastore
from poor_jokes.tests.stubs import InMemoryJokeDatastore, RecordingNotifier
from poor_jokes.utils.db_session import build_session_factory


@pytest.fixture
def datastore():
    return InMemoryJokeDatastore()


@pytest.fixture
def recorder():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(recorder):
    """Dispatcher without a running worker; tests call drain() to deliver."""
    return NotificationDispatcher([recorder], timeout_seconds=1.0, queue_size=100)


@pytest.fixture
def service(datastore, dispatcher):
    return ModerationService(datastore, dispatcher, detector=DuplicateDetector(threshold=0.90))


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path):
    """File-backed SQLite engine with the schema created from the ORM metadata."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'jokes.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_datastore(sqlite_engine):
    return SqlAlchemyJokeDatastore(build_session_factory(sqlite_engine))
