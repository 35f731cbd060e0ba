from .in_memory_datastore import InMemoryJokeDatastore
from .notifiers import FailingNotifier, HangingNotifier, RecordingNotifier

__all__ = ["InMemoryJokeDatastore", "FailingNotifier", "HangingNotifier", "RecordingNotifier"]
