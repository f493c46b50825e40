from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from shared.config.database import Base

PENDING = "pending"
SUCCESS = "success"
FAILED = "failed"
TERMINAL_STATUSES = (SUCCESS, FAILED)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, index=True)  # UUID string
    order_id = Column(String, unique=True, nullable=False, index=True)
    # Weak reference to users.id, no cascading deletes
    user_id = Column(String(36), nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="BYN")
    description = Column(String, nullable=True)
    status = Column(String, nullable=False, default=PENDING) # pending, success, failed
    course_id = Column(Integer, nullable=True)
    stage_id = Column(Integer, nullable=True)
    wsb_seed = Column(String, nullable=False)
    wsb_test = Column(String(1), nullable=False)
    wsb_signature = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())
