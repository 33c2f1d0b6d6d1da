from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from typing import Optional
from core.config import Settings
from core.dependencies import get_auth_context, get_optional_auth_context, get_settings, get_uploader
from core.errors import InvalidInput
from db.session import get_db
from schemas.medical_record import MedRecordResponse
from services import access_guard, record_store
from services.auth_service import AuthContext
from services.storage_service import discard_uploaded, upload_all
import logging

router = APIRouter()

ATTACHMENT_FIELD = "prescriptions"


@router.post("/medform", response_model=MedRecordResponse, status_code=status.HTTP_201_CREATED)
async def submit_medform(
    request: Request,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    uploader=Depends(get_uploader),
):
    """Validate the intake form, upload its attachments, then persist it.

    Nothing is stored unless every attachment upload succeeds.
    """
    form = await request.form()
    files = [
        f for f in form.getlist(ATTACHMENT_FIELD)
        if isinstance(f, UploadFile) and f.filename
    ]
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise InvalidInput(f"At most {settings.MAX_UPLOAD_FILES} prescription files are allowed")

    fields = {k: v for k, v in form.items() if not isinstance(v, UploadFile)}
    record_in = record_store.validate(fields)
    # refuse early so nothing is uploaded for a submission that cannot be stored
    await run_in_threadpool(record_store.ensure_writable, db, ctx.user.id, settings.RECORD_WRITE_POLICY)

    urls = await run_in_threadpool(
        upload_all, uploader, files, settings.S3_PRESCRIPTIONS_FOLDER,
        settings.UPLOAD_TMP_DIR, settings.UPLOAD_WORKERS,
    )
    try:
        record = await run_in_threadpool(access_guard.authorize_write, db, settings, ctx.user, record_in, urls)
    except Exception:
        await run_in_threadpool(discard_uploaded, uploader, urls)
        raise
    return {"message": "Medical record saved successfully", "medRecord": record}


@router.get("/dashboard/medform", response_model=MedRecordResponse)
def get_own_medform(
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    record = access_guard.authorize_read(db, settings, None, ctx.user)
    return {"medRecord": record}


@router.get("/dashboard/medform/{user_id}", response_model=MedRecordResponse)
def get_medform_by_user(
    user_id: str,
    ctx: Optional[AuthContext] = Depends(get_optional_auth_context),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    logging.info("Fetching medical form for userId: %s", user_id)
    record = access_guard.authorize_read(db, settings, user_id, ctx.user if ctx else None)
    return {"medRecord": record}
