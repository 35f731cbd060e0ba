from .datastore import JokeDatastore, SqlAlchemyJokeDatastore

__all__ = ["JokeDatastore", "SqlAlchemyJokeDatastore"]
