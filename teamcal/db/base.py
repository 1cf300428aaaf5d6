"""
Declarative base for all ORM models.
Import Base from here and subclass it. Alembic migrations build the tables;
the test suite uses Base.metadata.create_all().
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
