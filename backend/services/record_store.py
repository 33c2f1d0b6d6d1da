import json
import logging
from typing import Any, Dict, List, Mapping, Optional
import pydantic
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from core.config import RecordWritePolicy
from core.errors import DuplicateRecord, StorageError, ValidationError
from models.medical_record import MedicalRecord
from schemas.medical_record import CATEGORY_FIELDS, MedicalRecordIn

CATEGORY_FIELDS_ATTRS = ("family_history", "currently_experiencing", "immunizations", "lifestyle")


def _decode_category(name: str, raw: Any) -> Any:
    # multipart forms carry the category maps as JSON strings
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError([name], message=f"{name} must be a JSON object")
    if not isinstance(raw, dict):
        raise ValidationError([name], message=f"{name} must be a JSON object")
    return raw


def validate(data: Mapping[str, Any]) -> MedicalRecordIn:
    """Validate submitted form fields, raising ValidationError naming every bad field."""
    payload: Dict[str, Any] = dict(data)
    bad: List[str] = []
    for name in CATEGORY_FIELDS:
        try:
            payload[name] = _decode_category(name, payload.get(name))
        except ValidationError:
            bad.append(name)
    try:
        record = MedicalRecordIn.model_validate(payload)
    except pydantic.ValidationError as e:
        bad.extend(".".join(str(p) for p in err["loc"]) for err in e.errors())
        record = None
    if bad:
        raise ValidationError(sorted(set(bad)))
    return record


def _columns(record: MedicalRecordIn, attachments: List[str]) -> Dict[str, Any]:
    values = record.model_dump(exclude=set(CATEGORY_FIELDS_ATTRS))
    for attr in CATEGORY_FIELDS_ATTRS:
        values[attr] = getattr(record, attr).model_dump(by_alias=True)
    values["prescriptions"] = list(attachments)
    return values


def find_by_user(db: Session, user_id: str) -> Optional[MedicalRecord]:
    return (
        db.query(MedicalRecord)
        .filter(MedicalRecord.user_id == user_id)
        .order_by(MedicalRecord.created_at.desc())
        .first()
    )


def ensure_writable(db: Session, user_id: str, policy: RecordWritePolicy) -> Optional[MedicalRecord]:
    """Return the user's current record, or raise DuplicateRecord if the policy forbids a rewrite."""
    existing = find_by_user(db, user_id)
    if existing is not None and policy == RecordWritePolicy.REJECT:
        raise DuplicateRecord()
    return existing


def save(db: Session, user_id: str, record: MedicalRecordIn, attachments: List[str],
         policy: RecordWritePolicy = RecordWritePolicy.UPSERT) -> MedicalRecord:
    """Persist the user's record according to ``policy``.

    UPSERT replaces the existing record in place (owner and created_at unchanged);
    REJECT refuses a second submission.
    """
    existing = ensure_writable(db, user_id, policy)

    values = _columns(record, attachments)
    try:
        if existing is None:
            db_record = MedicalRecord(user_id=user_id, **values)
            db.add(db_record)
        else:
            db_record = existing
            for field, value in values.items():
                setattr(db_record, field, value)
        db.commit()
        db.refresh(db_record)
    except IntegrityError:
        # lost a race with a concurrent first submission
        db.rollback()
        raise DuplicateRecord()
    except SQLAlchemyError as e:
        logging.error(f"Failed to save medical record: {str(e)}")
        try:
            db.rollback()
        except Exception:
            pass
        raise StorageError(str(e), message="Error saving medical record")
    logging.info("Medical record %s for user %s", "updated" if existing else "created", user_id)
    return db_record
