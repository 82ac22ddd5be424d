"""Image uploads for site hero and story galleries."""

from fastapi import APIRouter, Depends, File, UploadFile

from amor_presente.auth.context import AuthContext
from amor_presente.auth.middleware import require_creator_write
from amor_presente.config import get_settings
from amor_presente.storage.uploads import upload_image

router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.post("/images", status_code=201)
async def upload(
    file: UploadFile = File(...),
    ctx: AuthContext = Depends(require_creator_write),
) -> dict[str, str]:
    # One byte over the limit is enough to reject.
    data = await file.read(get_settings().upload_max_bytes + 1)
    return await upload_image(ctx.subject_id, file.filename, file.content_type, data)
