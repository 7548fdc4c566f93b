"""
Base model class for all database models.

Provides common functionality and fields for all models:
- Primary key (opaque string identifier, UUID4 by default)
- Timestamp fields (created_at, updated_at)
- Utility methods (to_dict, update_from_dict)
- SQLAlchemy declarative base
"""

import uuid as uuid_lib
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base, validates

from costchain.utils.datetime_utils import utc_now

# Create the declarative base for all models
Base = declarative_base()


def new_id() -> str:
    """Generate a new opaque primary key."""
    return str(uuid_lib.uuid4())


class BaseModel(Base):
    """
    Abstract base model with common fields and methods.

    All models inherit from this class to get:
    - id: Opaque string primary key. Callers may supply their own ids
      (e.g. keys coming from another store); otherwise a UUID4 is used.
    - created_at: Timestamp when record was created
    - updated_at: Timestamp when record was last modified
    - to_dict(): Convert model to dictionary
    """

    __abstract__ = True

    id = Column(String(64), primary_key=True, default=new_id)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    @validates("id")
    def _validate_id(self, _key: str, value: Any) -> str:
        """Normalize identifiers to strings."""
        if value is None:
            return value
        return str(value)

    def to_dict(self, include_relationships: bool = False) -> Dict[str, Any]:
        """
        Convert model instance to dictionary.

        Datetimes are converted to ISO strings; Decimal values are kept as
        Decimal so callers decide on display precision.

        Args:
            include_relationships: If True, include related objects (default: False)

        Returns:
            Dictionary representation of the model
        """
        result = {}

        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[column.name] = value

        if include_relationships:
            for relationship in self.__mapper__.relationships:
                rel_name = relationship.key
                rel_value = getattr(self, rel_name)

                if rel_value is None:
                    result[rel_name] = None
                elif isinstance(rel_value, list):
                    result[rel_name] = [item.to_dict() for item in rel_value]
                else:
                    result[rel_name] = rel_value.to_dict()

        return result

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        """
        Update model instance from dictionary.

        Only updates fields that exist in the model and are in the dictionary.
        Identifiers and timestamps are never taken from the input.

        Args:
            data: Dictionary with field names and values
        """
        for column in self.__table__.columns:
            if column.name in data and column.name not in ["id", "created_at", "updated_at"]:
                value = data[column.name]
                if isinstance(value, float):
                    value = Decimal(str(value))
                setattr(self, column.name, value)

        self.updated_at = utc_now()

    def __repr__(self) -> str:
        """
        String representation of model instance.

        Returns:
            String like "ClassName(id='...', name='...')"
        """
        class_name = self.__class__.__name__
        attrs = []

        if getattr(self, "id", None) is not None:
            attrs.append(f"id='{self.id}'")

        if getattr(self, "name", None) is not None:
            attrs.append(f"name='{self.name}'")

        attrs_str = ", ".join(attrs)
        return f"{class_name}({attrs_str})"
