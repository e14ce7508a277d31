"""
Upload Routes

POST /upload - Upload a PDF or DOCX resume and extract its text
"""

from fastapi import APIRouter, Depends, File, UploadFile

from staffing_crm.core.auth import require_permission
from staffing_crm.core.permissions import CANDIDATES_WRITE
from staffing_crm.models import User
from staffing_crm.schemas.schemas import UploadResponse
from staffing_crm.utils.file_upload import save_upload

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post("", response_model=UploadResponse)
def upload_file(
    file: UploadFile = File(...),
    user: User = Depends(require_permission(CANDIDATES_WRITE)),
):
    """
    Store the file under the upload directory and return its URL and
    extracted text. Attach it to a candidate with PUT /candidates/{id}.
    """
    return save_upload(file)
