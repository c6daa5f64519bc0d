# app/models/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Every tenant-owned model carries an account_id column; there is
    one shared schema for all accounts.
    """

    pass
