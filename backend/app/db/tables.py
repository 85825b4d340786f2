"""Table definitions mirroring sql/010_schema.sql.

The PostgreSQL schema additionally carries the ``reservation_no_room_overlap``
exclusion constraint, which has no portable SQLAlchemy form and lives only in SQL.
"""
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Uuid,
    func,
)

metadata = MetaData()


room_type = Table(
    "room_type",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("guest_capacity", Integer, nullable=False),
    Column("price", Numeric(10, 2), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

room = Table(
    "room",
    metadata,
    Column("number", Integer, primary_key=True, autoincrement=False),
    Column("type_id", Integer, ForeignKey("room_type.id"), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

reservation = Table(
    "reservation",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("room", Integer, ForeignKey("room.number"), nullable=False),
    Column("checkin_date", Date, nullable=False),
    Column("checkout_date", Date, nullable=False),
    Column("user_id", String(255), nullable=False),
    Column("user_name", String(255), nullable=False),
    Column("user_email", String(255), nullable=False),
    Column("user_contact_number", String(255), nullable=False),
    Column("status", String(16), nullable=False, server_default="active"),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Index("reservation_room_dates_index", "room", "checkin_date", "checkout_date"),
    Index("reservation_user_index", "user_id"),
)
