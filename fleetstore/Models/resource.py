# fleetstore/Models/resource.py

"""
Resource Model - Account-Owned Named Values

A Resource is a small named blob owned by an Account: report templates,
logos, colour schemes, per-account property sets. The type tells how to
interpret value (text-like types hold UTF-8 text, image/* and binary hold
raw bytes). Property-set resources keep their content in the properties
JSON column instead of value.

Database Table: resource
Primary Key: (accountID, resourceID)
"""

from sqlalchemy import (
    Column, String, DateTime, JSON, LargeBinary, ForeignKeyConstraint
)
from sqlalchemy.sql import func
from fleetstore.DB.base_class import Base


RESOURCE_TYPE_TEXT = "text"
RESOURCE_TYPE_XML = "xml"
RESOURCE_TYPE_HTML = "html"
RESOURCE_TYPE_URL = "url"
RESOURCE_TYPE_IMAGE_PNG = "image/png"
RESOURCE_TYPE_BINARY = "binary"
RESOURCE_TYPE_PROPERTIES = "rtprops"
RESOURCE_TYPE_COLOR = "color"

_STRING_TYPE_PREFIXES = (
    RESOURCE_TYPE_TEXT, RESOURCE_TYPE_XML, RESOURCE_TYPE_HTML,
    RESOURCE_TYPE_URL, RESOURCE_TYPE_PROPERTIES, RESOURCE_TYPE_COLOR
)


def is_string_type(resource_type) -> bool:
    """Text-valued types; blank is not a string type."""
    if not resource_type:
        return False
    return resource_type.strip().lower().startswith(_STRING_TYPE_PREFIXES)


class Resource(Base):
    """
    SQLAlchemy model representing one account resource.

    Schema:
    - accountID (PK, FK): Owning account (lowercase)
    - resourceID (PK): Resource name, case preserved
    - type: Value type (text, xml, html, url, image/png, binary, rtprops, color)
    - title: Short title
    - description: Longer description
    - properties: String-keyed values (property-set resources)
    - value: Raw value bytes
    """

    accountID = Column(String(32), primary_key=True)
    resourceID = Column(String(80), primary_key=True)

    type = Column(String(16), nullable=True)
    title = Column(String(70), nullable=True)
    description = Column(String(128), nullable=True)

    properties = Column(JSON, nullable=True)
    value = Column(LargeBinary, nullable=True)

    creationTime = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    lastUpdateTime = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        ForeignKeyConstraint(
            ["accountID"],
            ["account.accountID"],
            name="fk_resource_account",
            ondelete="CASCADE"
        ),
    )

    # ============================================================
    # Value access
    # ============================================================

    def get_value(self):
        """str for text-like types, bytes otherwise (None when unset)."""
        if self.value is None:
            return None
        if is_string_type(self.type):
            return self.value.decode("utf-8")
        return self.value

    def set_value(self, value) -> None:
        """
        Store str as UTF-8, bytes as-is, and a dict as the property set.
        """
        if isinstance(value, dict):
            self.properties = dict(value)
            self.value = None
        elif isinstance(value, str):
            self.value = value.encode("utf-8")
        elif isinstance(value, (bytes, bytearray)):
            self.value = bytes(value)
        elif value is None:
            self.value = None
        else:
            raise TypeError(f"Unsupported resource value type: {type(value).__name__}")

    def get_property(self, key: str, default=None):
        props = self.properties or {}
        return props.get(key, default)

    def set_property(self, key: str, value) -> None:
        # reassign so the JSON column is flagged dirty
        props = dict(self.properties or {})
        props[key] = value
        self.properties = props

    def __repr__(self) -> str:
        return (
            f"<Resource(accountID={self.accountID!r}, resourceID={self.resourceID!r}, "
            f"type={self.type!r})>"
        )
