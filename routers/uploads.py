# routers/uploads.py

import re
import time

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, Response, UploadFile
from sqlmodel import Session, select

from core.logging_config import logger
from core.policy import Action, ResourceKind, ResourceRef
from core.storage import ObjectStorage, StorageError, get_storage
from core.utils import safe_filename
from database import get_session
from dependencies.auth import enforce, get_settings, require
from models.auth import Principal
from models.enums import DEFAULT_UPLOAD_CATEGORY
from models.order import Order


router = APIRouter(tags=["Uploads"])


CATEGORY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


# -----------------------------------------------------
# POST /upload
# -----------------------------------------------------
@router.post("/upload", summary="Upload a file to object storage")
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    category: str = Form(DEFAULT_UPLOAD_CATEGORY, alias="type"),
    principal: Principal = Depends(require(ResourceKind.file, Action.upload)),
    storage: ObjectStorage = Depends(get_storage),
):
    """
    Stores the bytes under `{category}/{epoch_ms}_{sanitized name}`.
    Size and category are validated before anything is written.
    """
    category = (category or DEFAULT_UPLOAD_CATEGORY).strip() or DEFAULT_UPLOAD_CATEGORY
    if not CATEGORY_RE.match(category):
        raise HTTPException(400, "Invalid file type category")

    max_bytes = get_settings(request).MAX_UPLOAD_BYTES
    too_large = f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB"
    if file.size is not None and file.size > max_bytes:
        raise HTTPException(400, too_large)

    # One byte past the limit is enough to reject
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise HTTPException(400, too_large)

    original_name = file.filename or "upload"
    clean_name = safe_filename(original_name)
    path = f"{category}/{int(time.time() * 1000)}_{clean_name}"
    content_type = file.content_type or "application/octet-stream"

    try:
        stored_path = storage.upload(path, data, content_type)
        url = storage.public_url(stored_path)
    except StorageError as e:
        logger.error(f"Upload failed for {principal.id}: {e}")
        raise HTTPException(500, "Upload failed")

    logger.info(f"Uploaded {stored_path} ({len(data)} bytes) for {principal.id}")

    return {
        "success": True,
        "url": url,
        "file_name": original_name,
        "file_path": stored_path,
        "file_size": len(data),
        "file_type": content_type,
        "pages": 1,
    }


# -----------------------------------------------------
# GET /files/download?path=
# -----------------------------------------------------
@router.get("/files/download", summary="Download a stored file")
def download_file(
    path: str = Query(None),
    principal: Principal = Depends(require(ResourceKind.file, Action.download)),
    session: Session = Depends(get_session),
    storage: ObjectStorage = Depends(get_storage),
):
    """
    Staff and admins can fetch any path; a customer only the file
    attached to one of their orders.
    """
    if not path or not path.strip():
        raise HTTPException(400, "File path is required")
    path = path.strip()

    order = session.exec(select(Order).where(Order.file_path == path)).first()
    enforce(
        principal, ResourceKind.file, Action.download,
        ResourceRef(ResourceKind.file, id=path, owner_id=order.user_id if order else None),
    )

    try:
        data = storage.download(path)
    except StorageError as e:
        logger.error(f"Download failed for {path}: {e}")
        raise HTTPException(500, "Download failed")

    filename = path.rsplit("/", 1)[-1]
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
