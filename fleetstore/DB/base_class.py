"""
fleetstore/DB/base_class.py
=================================
SQLAlchemy Base Model Definition
=================================

Declarative base class for all tables of the event store. Table names
are derived from class names using lowercase conversion:
    - Account     → account
    - Device      → device
    - DeviceGroup → devicegroup
    - DeviceList  → devicelist
    - DeviceUList → deviceulist
    - Resource    → resource
    - EventData   → eventdata

Note:
    All models must inherit from this Base class to be registered with
    SQLAlchemy's metadata and discovered by Alembic migrations.
"""

from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models in the application.

    Class Attributes:
        __tablename__: Automatically generated from class name (lowercase)
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        """
        Generate table name from class name using lowercase convention.

        Examples:
            EventData → 'eventdata'
            DeviceGroup → 'devicegroup'
        """
        return cls.__name__.lower()
