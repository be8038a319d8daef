from __future__ import annotations

from flask import request

from ..core.exceptions import ValidationError


def require_upload(field_name: str = "file"):
    """Return the uploaded FileStorage for `field_name` or raise ValidationError."""
    upload = request.files.get(field_name)
    if upload is None or not upload.filename:
        raise ValidationError(f"{field_name} is required")
    return upload
