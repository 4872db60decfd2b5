from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    CheckConstraint,
    Index,
)
from datetime import datetime
from sipe.core.database import Base


class Equipment(Base):
    __tablename__ = "equipment"

    __table_args__ = (
        # SAFETY CONSTRAINTS
        CheckConstraint("stock >= 0", name="ck_equipment_stock_non_negative"),

        # PERFORMANCE INDEXES
        Index("ix_equipment_last_updated", "last_updated"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # stored trimmed + upper-cased
    code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    purchase_date = Column(Date, nullable=False)

    stock = Column(Integer, nullable=False, default=0)
    notes = Column(String, nullable=False, default="")

    # refreshed explicitly on every stock or metadata change
    last_updated = Column(DateTime, nullable=False, default=datetime.utcnow)

    # timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
