import logging
import mimetypes
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence
import boto3
from botocore.exceptions import ClientError
from starlette.datastructures import UploadFile
from core.config import Settings
from core.errors import UploadError
from utils.file_utils import spooled_to_disk, unique_key


class S3Uploader:
    """Pushes local files to the configured bucket and hands back public URLs."""

    def __init__(self, settings: Settings):
        self.settings = settings
        # own session, client built once here; upload workers share the client
        session = boto3.session.Session(
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            region_name=settings.S3_REGION or None,
        )
        self.client = session.client("s3")

    def public_url(self, key: str) -> str:
        return f"https://{self.settings.S3_BUCKET}.s3.{self.settings.S3_REGION}.amazonaws.com/{key}"

    def key_from_url(self, url: str) -> str:
        prefix = self.public_url("")
        return url[len(prefix):] if url.startswith(prefix) else url

    def upload(self, local_path: str, folder: str, filename: Optional[str] = None) -> str:
        key = unique_key(folder, filename or os.path.basename(local_path))
        content_type = mimetypes.guess_type(filename or local_path)[0] or "application/octet-stream"
        try:
            self.client.upload_file(
                local_path,
                self.settings.S3_BUCKET,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except Exception as e:
            logging.error(f"S3 upload failed for key={key}: {str(e)}")
            raise UploadError(str(e))
        return self.public_url(key)

    def delete(self, url: str) -> None:
        """Delete an uploaded object; ignore if missing."""
        key = self.key_from_url(url)
        try:
            self.client.delete_object(Bucket=self.settings.S3_BUCKET, Key=key)
        except ClientError as ce:
            code = getattr(ce, 'response', {}).get('Error', {}).get('Code')
            if str(code) not in ("NoSuchKey", "404"):
                logging.error(f"S3 delete_object failed for key={key}: {code}")
                raise


def discard_uploaded(uploader, urls: Sequence[str]) -> None:
    """Best-effort removal of objects from an aborted submission."""
    for url in urls:
        try:
            uploader.delete(url)
        except Exception:
            logging.warning(f"Could not remove orphaned upload {url}", exc_info=True)


def upload_all(uploader, files: Sequence[UploadFile], folder: str, tmp_dir: str, workers: int = 4) -> List[str]:
    """Upload every file concurrently; either all succeed or none are kept.

    Each file goes through a local temp copy that is deleted whatever the outcome.
    URLs come back in the order of ``files``.
    """
    if not files:
        return []

    def _one(upload: UploadFile) -> str:
        with spooled_to_disk(upload.file, tmp_dir, upload.filename) as path:
            return uploader.upload(path, folder, upload.filename)

    urls: List[str] = [""] * len(files)
    failures: List[Exception] = []
    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(files)))) as ex:
        futures = {ex.submit(_one, f): i for i, f in enumerate(files)}
        for fut in as_completed(futures):
            try:
                urls[futures[fut]] = fut.result()
            except Exception as e:
                logging.warning(f"Attachment upload failed: {str(e)}")
                failures.append(e)

    if failures:
        discard_uploaded(uploader, [u for u in urls if u])
        first = failures[0]
        if isinstance(first, UploadError):
            raise first
        raise UploadError(str(first))
    logging.info("Uploaded %d attachment(s) to %s", len(urls), folder)
    return urls
