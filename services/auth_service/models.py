from sqlalchemy import Column, DateTime, JSON, String
from sqlalchemy.sql import func

from shared.config.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)  # UUID string
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=True)
    avatar = Column(String, nullable=True)
    # Unlocked content ids; order and duplicates are kept as given
    open_categories = Column(JSON, nullable=False, default=list)
    purchased_stages = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
