import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from core.errors import DuplicateEmail, StorageError
from models.user import User


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def create(db: Session, fullname: str, email: str, hashed_password: str) -> User:
    """Insert a user; the unique index on email decides concurrent registrations."""
    user = User(fullname=fullname, email=email, hashed_password=hashed_password)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logging.info("Registration rejected, email already present")
        raise DuplicateEmail()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to create user: {str(e)}")
        raise StorageError(str(e))
    db.refresh(user)
    return user
