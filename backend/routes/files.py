from fastapi import APIRouter, Depends, File, UploadFile
from typing import List
from core.config import Settings
from core.dependencies import get_settings, get_uploader
from core.errors import InvalidInput
from schemas.medical_record import UploadResponse
from services.storage_service import upload_all

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
def upload_files(
    files: List[UploadFile] = File(...),
    settings: Settings = Depends(get_settings),
    uploader=Depends(get_uploader),
):
    files = [f for f in files if f.filename]
    if not files:
        raise InvalidInput("No files uploaded")
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise InvalidInput(f"At most {settings.MAX_UPLOAD_FILES} files are allowed")
    urls = upload_all(uploader, files, settings.S3_FILES_FOLDER, settings.UPLOAD_TMP_DIR, settings.UPLOAD_WORKERS)
    return {"urls": urls}
