"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status

from app.readers.tabular_reader import SUPPORTED_EXTENSIONS

TABULAR_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def get_tabular_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV or XLSX by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    has_supported_extension = filename.endswith(SUPPORTED_EXTENSIONS)
    has_supported_content_type = content_type in TABULAR_CONTENT_TYPES

    if not has_supported_extension and not has_supported_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Only {', '.join(SUPPORTED_EXTENSIONS)} files are allowed.",
        )

    return file
