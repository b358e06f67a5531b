# apps/api/workboard/core/storage.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import shutil
import boto3
from botocore.config import Config
import logging
from botocore.exceptions import ClientError

from .settings import settings

logger = logging.getLogger("storage")


@dataclass(frozen=True)
class StorageConfig:
    endpoint_url: str
    bucket: str
    public_base_url: str | None

_logged_config = False


def is_object_storage() -> bool:
    return settings.STORAGE_BACKEND == "object"


def get_storage_config() -> StorageConfig:
    global _logged_config
    if not is_object_storage():
        raise RuntimeError("Object storage is not enabled")
    if not all(
        [
            settings.OBJECT_STORAGE_ENDPOINT,
            settings.OBJECT_STORAGE_BUCKET,
        ]
    ):
        raise RuntimeError("Missing object storage configuration")
    cfg = StorageConfig(
        endpoint_url=settings.OBJECT_STORAGE_ENDPOINT or "",
        bucket=(settings.OBJECT_STORAGE_BUCKET or "").strip(),
        public_base_url=settings.OBJECT_STORAGE_PUBLIC_BASE_URL,
    )
    if not _logged_config:
        logger.info(
            "Object storage config loaded: endpoint=%s bucket=%s public_base=%s",
            cfg.endpoint_url,
            cfg.bucket,
            cfg.public_base_url or "",
        )
        _logged_config = True
    return cfg

def get_s3_client():
    cfg = get_storage_config()
    return boto3.client(
        "s3",
        endpoint_url=cfg.endpoint_url,
        config=Config(s3={"addressing_style": "path"}),
    )


def local_path_for_key(key: str) -> Path:
    root = Path(settings.LOCAL_UPLOAD_ROOT).resolve()
    path = (root / key).resolve()
    if not path.is_relative_to(root):
        raise ValueError("Invalid storage key")
    return path


def upload_fileobj(*, fileobj, key: str, content_type: str):
    if not is_object_storage():
        target = local_path_for_key(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            shutil.copyfileobj(fileobj, f)
        return

    cfg = get_storage_config()
    s3 = get_s3_client()
    try:
        s3.upload_fileobj(
            Fileobj=fileobj,
            Bucket=cfg.bucket,
            Key=key,
            ExtraArgs={"ContentType": content_type},
        )
    except ClientError as exc:
        logger.exception("Object storage upload failed: %s", exc)
        raise

def delete_object(*, key: str):
    if not is_object_storage():
        local_path_for_key(key).unlink(missing_ok=True)
        return
    cfg = get_storage_config()
    s3 = get_s3_client()
    s3.delete_object(Bucket=cfg.bucket, Key=key)

def get_public_url(*, key: str) -> str:
    if not is_object_storage():
        return f"{settings.LOCAL_PUBLIC_BASE_URL.rstrip('/')}/{key}"
    cfg = get_storage_config()
    if cfg.public_base_url:
        return f"{cfg.public_base_url.rstrip('/')}/{key}"
    return f"{cfg.endpoint_url.rstrip('/')}/{cfg.bucket}/{key}"

def get_presigned_get_url(*, key: str, expires_in: int = 600) -> str:
    cfg = get_storage_config()
    s3 = get_s3_client()
    return s3.generate_presigned_url(
        ClientMethod="get_object",
        Params={"Bucket": cfg.bucket, "Key": key},
        ExpiresIn=expires_in,
    )
