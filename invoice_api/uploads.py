import json
import logging
import shutil
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Tuple

from fastapi import HTTPException, Request
from starlette.datastructures import UploadFile

logger = logging.getLogger(__name__)

# Multipart field -> document key
INVOICE_ASSET_FIELDS = {
    "logo": "logoDataUrl",
    "stamp": "stampDataUrl",
    "signature": "signatureDataUrl",
}

PROFILE_ASSET_FIELDS = {
    "logo": "logoUrl",
    "stamp": "stampUrl",
    "signature": "signatureUrl",
}


async def read_payload(request: Request) -> Tuple[Dict[str, Any], Dict[str, UploadFile]]:
    """Read a request body sent either as JSON or as a multipart/urlencoded form.

    Returns the plain fields and the uploaded files separately.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        fields: Dict[str, Any] = {}
        files: Dict[str, UploadFile] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                files[key] = value
            else:
                fields[key] = value
        return fields, files

    raw = await request.body()
    if not raw:
        return {}, {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body, {}


def _safe_suffix(filename: str) -> str:
    suffix = Path(filename or "").suffix.lower()
    return suffix if suffix[1:].isalnum() and len(suffix) <= 10 else ""


def save_uploads(
    files: Mapping[str, UploadFile],
    field_map: Mapping[str, str],
    upload_dir: str,
    public_url: str,
) -> Dict[str, str]:
    """Store the uploaded asset files and map them to their public URLs"""
    urls: Dict[str, str] = {}
    target_dir = Path(upload_dir)

    for field_name, document_key in field_map.items():
        upload = files.get(field_name)
        if upload is None or not upload.filename:
            continue

        target_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{field_name}-{uuid.uuid4().hex}{_safe_suffix(upload.filename)}"
        with open(target_dir / filename, "wb") as out:
            upload.file.seek(0)
            shutil.copyfileobj(upload.file, out)

        logger.info("Stored %s upload as %s", field_name, filename)
        urls[document_key] = f"{public_url}/uploads/{filename}"

    return urls


def discard_uploads(urls: Mapping[str, str], upload_dir: str) -> None:
    """Remove files written by save_uploads"""
    for url in urls.values():
        filename = url.rsplit("/", 1)[-1]
        (Path(upload_dir) / filename).unlink(missing_ok=True)
        logger.info("Discarded upload %s", filename)


@contextmanager
def stored_uploads(
    files: Mapping[str, UploadFile],
    field_map: Mapping[str, str],
    upload_dir: str,
    public_url: str,
) -> Iterator[Dict[str, str]]:
    """Save uploads for the duration of a write; they are removed again if the write fails"""
    urls = save_uploads(files, field_map, upload_dir, public_url)
    try:
        yield urls
    except BaseException:
        discard_uploads(urls, upload_dir)
        raise
