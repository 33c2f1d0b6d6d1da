from sqlalchemy import Column, String, Text, ForeignKey, DateTime, Integer, Float, JSON
from sqlalchemy.orm import relationship
import uuid
from db.base import Base
from datetime import datetime


class MedicalRecord(Base):
    __tablename__ = "medical_records"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # no ON DELETE cascade: records outlive their user
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, index=True, nullable=False)

    age = Column(Integer, nullable=False)
    height = Column(Float, nullable=False)
    weight = Column(Float, nullable=False)
    gender = Column(String(32), nullable=False)
    blood_group = Column(String(8), nullable=False)
    emergency_contact = Column(String(255), nullable=False)

    allergies = Column(Text)
    medication = Column(Text)
    medication_list = Column(Text)
    surgeries = Column(Text)
    prescriptions = Column(JSON, nullable=False, default=list)

    family_history = Column(JSON, nullable=False, default=dict)
    currently_experiencing = Column(JSON, nullable=False, default=dict)
    immunizations = Column(JSON, nullable=False, default=dict)
    lifestyle = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    user = relationship("User", back_populates="medical_record")
