"""File upload router endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

import authentication.auth as auth
import repositories.db_models as db_models
from helpers.responses import api_response
from services.upload_service import StorageBackend, UploadService, get_storage_backend

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("")
def upload_file(
    file: Optional[UploadFile] = File(None),
    current_user: db_models.User = Depends(auth.get_current_active_user),
    storage: StorageBackend = Depends(get_storage_backend),
) -> dict:
    """
    Upload one image, PDF or Word document (multipart field ``file``).

    Files over 5MB are rejected.
    """
    uploaded = UploadService.upload(file, storage)
    return api_response(uploaded, "File uploaded successfully")
