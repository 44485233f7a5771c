# File: storefront/models/base.py

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    The storefront models (User, Order) inherit from this so that
    ``Base.metadata.create_all`` sees every table.
    """
    pass
