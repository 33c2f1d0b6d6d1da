from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from db.base import Base


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    fullname = Column(String(100), nullable=False)
    # unique constraint arbitrates concurrent registrations
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(), default=datetime.utcnow)
    updated_at = Column(DateTime(), default=datetime.utcnow, onupdate=datetime.utcnow)
    medical_record = relationship("MedicalRecord", uselist=False, back_populates="user")
    sessions = relationship("UserSession", back_populates="user", passive_deletes=True)
