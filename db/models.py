"""
Declarative base for models created by ``pgai generate-model``.

Embedding columns are not declared here: pgai vectorizers write embeddings
to their own store table and expose them through a ``<table>_embedding`` view.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
