"""
Declarative base shared by all ORM models of the poor_jokes service.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
