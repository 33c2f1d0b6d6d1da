"""Decides who may write or read which medical record."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from core.config import Settings
from core.errors import Forbidden, RecordNotFound, Unauthenticated
from models.medical_record import MedicalRecord
from models.user import User
from schemas.medical_record import MedicalRecordIn
from services import record_store


def authorize_write(db: Session, settings: Settings, user: Optional[User], record: MedicalRecordIn,
                    attachments: List[str]) -> MedicalRecord:
    # the owner is always the authenticated user, whatever the form says
    if user is None:
        raise Unauthenticated()
    return record_store.save(db, user.id, record, attachments, settings.RECORD_WRITE_POLICY)


def authorize_read(db: Session, settings: Settings, requested_user_id: Optional[str],
                   session_user: Optional[User]) -> MedicalRecord:
    """Resolve which record the caller may read.

    Without ``requested_user_id`` this is a self-read and needs a session. With it,
    the lookup is open to anyone while ALLOW_PUBLIC_RECORD_LOOKUP is set; otherwise
    only the owner may read it.
    """
    if requested_user_id is None:
        if session_user is None:
            raise Unauthenticated()
        target = session_user.id
    elif settings.ALLOW_PUBLIC_RECORD_LOOKUP:
        if session_user is None or session_user.id != requested_user_id:
            logging.warning("Medical record for user %s read without owner session", requested_user_id)
        target = requested_user_id
    else:
        if session_user is None:
            raise Unauthenticated()
        if session_user.id != requested_user_id:
            raise Forbidden()
        target = requested_user_id

    record = record_store.find_by_user(db, target)
    if record is None:
        raise RecordNotFound()
    return record
