# Image upload endpoint: stores listing photos in Cloudinary and returns the hosted URL.
from __future__ import annotations

import logging
import os

import cloudinary
import cloudinary.uploader
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from .. import models, schemas
from .auth import get_current_user

router = APIRouter()
logger = logging.getLogger("yallambee.upload")

UPLOAD_FOLDER = "yallambee/properties"


def cloudinary_enabled() -> bool:
    """True only when all three Cloudinary credentials are set."""
    return all(
        os.getenv(name, "").strip()
        for name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET")
    )


def _configure_cloudinary() -> None:
    cloudinary.config(
        cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
        api_key=os.getenv("CLOUDINARY_API_KEY"),
        api_secret=os.getenv("CLOUDINARY_API_SECRET"),
        secure=True,
    )


@router.post("/upload", response_model=schemas.UploadResponse)
def upload_image(
    image: UploadFile | None = File(default=None),
    user: models.User = Depends(get_current_user),
) -> schemas.UploadResponse:
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if not cloudinary_enabled():
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Image storage is not configured")

    data = image.file.read()
    _configure_cloudinary()
    try:
        result = cloudinary.uploader.upload(data, folder=UPLOAD_FOLDER, resource_type="image")
    except Exception:
        logger.exception("upload.failed user_id=%s filename=%s", user.id, image.filename)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Upload failed")

    logger.info("upload.stored user_id=%s public_id=%s", user.id, result.get("public_id"))
    return schemas.UploadResponse(
        file=schemas.UploadedFile(
            filename=image.filename,
            path=result["secure_url"],
            size=len(data),
        )
    )
