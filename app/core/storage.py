# app/core/storage.py
"""Object storage for uploaded RFQ, quote and order documents.

``local`` writes under ``UPLOAD_DIR`` and is the development default;
``s3`` talks to any S3-compatible endpoint through boto3. Both backends
are synchronous, so async callers go through ``run_in_threadpool``.
"""

import io
import os
import shutil
import uuid
from datetime import datetime, timezone
from typing import BinaryIO
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool
from werkzeug.utils import secure_filename

from app.core import config
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)

CONTENT_TYPES = {
    "pdf": "application/pdf",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "step": "application/step",
    "stp": "application/step",
}

MAX_FILE_NAME_LENGTH = 255


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[1].lower() if "." in filename else ""


def guess_content_type(filename: str) -> str:
    return CONTENT_TYPES.get(file_extension(filename), "application/octet-stream")


def check_upload_size(size: int) -> None:
    limit = config.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if size > limit:
        raise AppException(
            413,
            f"File exceeds the {config.MAX_UPLOAD_SIZE_MB} MB upload limit",
            ErrorCode.PAYLOAD_TOO_LARGE,
        )
    if size == 0:
        raise AppException(400, "Uploaded file is empty", ErrorCode.VALIDATION_ERROR)


def check_file_name(filename: str) -> None:
    if len(filename) > MAX_FILE_NAME_LENGTH:
        raise AppException(
            400,
            f"File name is longer than {MAX_FILE_NAME_LENGTH} characters",
            ErrorCode.VALIDATION_ERROR,
        )


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and the RFC 5987 UTF-8 name."""
    ext = file_extension(filename)
    fallback = secure_filename(filename)
    if not fallback or fallback == ext:
        fallback = f"file.{ext}" if ext else "file"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def build_key(folder: str, filename: str) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    safe_name = secure_filename(filename) or "file"
    return f"{folder}/{timestamp}_{uuid.uuid4().hex[:8]}_{safe_name}"


class StorageError(AppException):
    def __init__(self, message: str):
        super().__init__(502, message, ErrorCode.STORAGE_ERROR)


class LocalStorage:
    def __init__(self, root: str):
        self.root = root
        os.makedirs(self.root, exist_ok=True)

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(os.path.abspath(self.root) + os.sep):
            raise StorageError("Invalid storage key")
        return path

    def save(self, file_obj: BinaryIO, key: str, content_type: str) -> None:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_obj.seek(0)
        with open(path, "wb") as out:
            shutil.copyfileobj(file_obj, out)

    def read(self, key: str) -> bytes:
        try:
            with open(self._path(key), "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise AppException(404, "Stored file not found", ErrorCode.NOT_FOUND)

    def delete(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


class S3Storage:
    def __init__(self, bucket: str, endpoint_url: str | None, region: str):
        self.bucket = bucket
        # credentials come from the standard AWS environment/profile chain
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
        )

    def save(self, file_obj: BinaryIO, key: str, content_type: str) -> None:
        file_obj.seek(0)
        try:
            self.client.upload_fileobj(
                file_obj,
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 upload failed", extra={"key": key, "error": str(e)})
            raise StorageError("File upload failed")

    def read(self, key: str) -> bytes:
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in {"NoSuchKey", "404"}:
                raise AppException(404, "Stored file not found", ErrorCode.NOT_FOUND)
            logger.error("S3 download failed", extra={"key": key, "error": str(e)})
            raise StorageError("File download failed")
        return obj["Body"].read()

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 delete failed", extra={"key": key, "error": str(e)})
            raise StorageError("File delete failed")


_storage = None


def get_storage():
    global _storage
    if _storage is None:
        if config.STORAGE_BACKEND == "s3":
            _storage = S3Storage(config.S3_BUCKET_NAME, config.S3_ENDPOINT_URL, config.S3_REGION)
        else:
            _storage = LocalStorage(config.UPLOAD_DIR)
        logger.info("Storage backend ready", extra={"backend": config.STORAGE_BACKEND})
    return _storage


def set_storage(storage) -> None:
    global _storage
    _storage = storage


# =====================================================
# ASYNC FACADE
# =====================================================
async def store_bytes(data: bytes, folder: str, filename: str) -> tuple[str, str]:
    """Persist ``data`` and return ``(key, content_type)``."""
    key = build_key(folder, filename)
    content_type = guess_content_type(filename)
    await run_in_threadpool(get_storage().save, io.BytesIO(data), key, content_type)
    logger.info("File stored", extra={"key": key, "size": len(data)})
    return key, content_type


async def read_bytes(key: str) -> bytes:
    return await run_in_threadpool(get_storage().read, key)


async def delete_object(key: str) -> None:
    await run_in_threadpool(get_storage().delete, key)


async def read_upload(upload, default_name: str = "upload") -> tuple[str, bytes]:
    """Read an ``UploadFile`` without pulling more than the size limit into memory."""
    filename = upload.filename or default_name
    check_file_name(filename)
    data = await upload.read(config.MAX_UPLOAD_SIZE_MB * 1024 * 1024 + 1)
    check_upload_size(len(data))
    return filename, data
