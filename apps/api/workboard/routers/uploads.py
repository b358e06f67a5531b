from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse, RedirectResponse

from ..core.storage import get_presigned_get_url, is_object_storage, local_path_for_key

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.get("/{key:path}")
def serve_upload(key: str):
    if is_object_storage():
        return RedirectResponse(get_presigned_get_url(key=key, expires_in=600))
    if ".." in key:
        raise HTTPException(status_code=400, detail="Invalid path")
    try:
        path = local_path_for_key(key)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid path")
    if not path.exists():
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(str(path))
