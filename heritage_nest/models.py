"""SQLAlchemy ORM models for persisted entities.

Defines the `User` credential record and the `Property` listing/auction record
together with their indexes. Property identifiers are opaque hex strings
generated on insert.
"""
import uuid

from sqlalchemy import Column, Text, String, Float, DateTime, JSON, Index, func, literal_column
from sqlalchemy.dialects.postgresql import JSONB
from .db import Base

DEFAULT_ROLE = "user"


def new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(Text)
    # unique at the store level; registration relies on it instead of a lookup
    email = Column(Text, nullable=False, unique=True, index=True)
    phone = Column(Text)
    password = Column(Text, nullable=False)
    role = Column(String(32), nullable=False, default=DEFAULT_ROLE)


class Property(Base):
    __tablename__ = "properties"
    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(Text)
    description = Column(Text)
    location = Column(Text)
    property_type = Column(Text)
    price = Column(Float)
    starting_bid = Column(Float)
    current_bid = Column(Float)
    # latest bidder only, no history
    bidder_id = Column(Text)
    name = Column(Text)
    email = Column(Text)
    phone = Column(Text)
    bid_time = Column(DateTime(timezone=True))
    extra = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
    created_at = Column(String(32))
    updated_at = Column(String(32))


TEXT_SEARCH_COLUMNS = (Property.title, Property.description, Property.location)


def search_document():
    """tsvector over the text columns; must match the GIN index expression."""
    blob = func.coalesce(TEXT_SEARCH_COLUMNS[0], "")
    for col in TEXT_SEARCH_COLUMNS[1:]:
        blob = blob + " " + func.coalesce(col, "")
    return func.to_tsvector(literal_column("'english'::regconfig"), blob)


Index("idx_properties_price", Property.price)
Index("idx_properties_type_location", Property.property_type, Property.location)
Index("idx_properties_text", search_document(), postgresql_using="gin").ddl_if(dialect="postgresql")
