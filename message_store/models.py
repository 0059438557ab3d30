"""
SQLAlchemy ORM models for the SQL-backed key-value store.

Every logical table shares one physical table; rows are keyed by
(table_name, item_id) and hold the full record as JSON.
"""

from sqlalchemy import JSON, Column, String
from sqlalchemy.orm import declarative_base

# Base class for SQLAlchemy models
Base = declarative_base()


class StoredItem(Base):
    """
    One record of a logical table.

    Table: store_items
    Primary Key: (table_name, item_id)
    """
    __tablename__ = "store_items"

    table_name = Column(String, primary_key=True)
    item_id = Column(String, primary_key=True)
    payload = Column(JSON, nullable=False)
