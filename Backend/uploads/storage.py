"""
Supabase Storage utility for handling media uploads.
"""
from __future__ import annotations

import logging
import os
import re
import secrets
import string
import time

from django.conf import settings

from users.provider import AuthProviderError, get_client

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Custom exception for storage operations."""
    pass


class SupabaseStorage:
    """
    Relays uploaded files to Supabase Storage and returns their public URLs.
    """
    IMAGE_BUCKET = "images"
    AUDIO_BUCKET = "sermons-audio"
    VIDEO_BUCKET = "sermons-video"

    ALLOWED_TYPES = re.compile(r"jpeg|jpg|png|gif|webp|mp3|mpeg|wav|m4a|ogg|mp4|mov|avi|webm")

    IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
    AUDIO_EXTENSIONS = (".mp3", ".wav", ".m4a", ".ogg")
    VIDEO_EXTENSIONS = (".mp4", ".mov", ".avi", ".webm")

    @classmethod
    def validate_file(cls, file) -> None:
        """
        Validate an uploaded file against the type allow-list and size cap.

        Raises:
            StorageError: If validation fails
        """
        if not file:
            raise StorageError("No file provided")

        content_type = (getattr(file, "content_type", "") or "").lower()
        extension = os.path.splitext(getattr(file, "name", "") or "")[1].lower()

        if not (cls.ALLOWED_TYPES.search(content_type) or cls.ALLOWED_TYPES.search(extension)):
            raise StorageError(
                "Invalid file type. Only images, audio, and video files are allowed."
            )

        max_size = settings.UPLOAD_MAX_FILE_SIZE
        file_size = getattr(file, "size", 0) or 0
        if file_size > max_size:
            raise StorageError(
                f"File too large: {file_size / (1024 * 1024):.1f}MB. "
                f"Maximum size: {max_size / (1024 * 1024):.0f}MB"
            )

    @classmethod
    def bucket_for(cls, content_type: str, filename: str) -> str:
        """Pick a bucket from the MIME family, falling back to the extension."""
        content_type = (content_type or "").lower()
        if content_type.startswith("image/"):
            return cls.IMAGE_BUCKET
        if content_type.startswith("audio/"):
            return cls.AUDIO_BUCKET
        if content_type.startswith("video/"):
            return cls.VIDEO_BUCKET

        extension = os.path.splitext(filename or "")[1].lower()
        if extension in cls.AUDIO_EXTENSIONS:
            return cls.AUDIO_BUCKET
        if extension in cls.VIDEO_EXTENSIONS:
            return cls.VIDEO_BUCKET
        return cls.IMAGE_BUCKET

    @staticmethod
    def generate_filename(original_name: str, folder: str = "") -> str:
        """
        <folder>/<clean basename>_<epoch millis>_<random>.<ext>
        """
        base, extension = os.path.splitext(os.path.basename(original_name or "upload"))
        clean_name = re.sub(r"[^a-z0-9]", "_", base, flags=re.IGNORECASE).lower() or "file"
        timestamp = int(time.time() * 1000)
        alphabet = string.ascii_lowercase + string.digits
        random_part = "".join(secrets.choice(alphabet) for _ in range(13))
        filename = f"{clean_name}_{timestamp}_{random_part}{extension.lower()}"

        folder = (folder or "").strip("/")
        return f"{folder}/{filename}" if folder else filename

    @classmethod
    def upload_file(cls, file, folder: str = "", bucket: str = "") -> dict:
        """
        Upload a file to Supabase Storage.

        Args:
            file: Django UploadedFile object
            folder: Optional path prefix inside the bucket
            bucket: Explicit bucket; derived from the MIME type when empty

        Returns:
            dict with 'url', 'path', 'bucket', 'size' and 'mimetype' keys

        Raises:
            StorageError: If validation or upload fails
        """
        cls.validate_file(file)

        content_type = getattr(file, "content_type", "") or "application/octet-stream"
        original_name = getattr(file, "name", "upload")
        bucket = bucket or cls.bucket_for(content_type, original_name)
        path = cls.generate_filename(original_name, folder)

        try:
            client = get_client()

            # Buffered in memory and relayed as-is
            file_content = file.read()

            client.storage.from_(bucket).upload(
                path=path,
                file=file_content,
                file_options={
                    "content-type": content_type,
                    "upsert": "false",
                },
            )

            public_url = client.storage.from_(bucket).get_public_url(path)

            logger.info(f"File uploaded successfully: {bucket}/{path}")

            return {
                "url": public_url,
                "path": path,
                "bucket": bucket,
                "size": getattr(file, "size", len(file_content)),
                "mimetype": content_type,
            }

        except AuthProviderError as e:
            raise StorageError(str(e))
        except Exception as e:
            logger.exception(f"Storage upload error: {e}")
            raise StorageError(f"Failed to upload file: {str(e)}")

    @classmethod
    def delete_file(cls, bucket: str, path: str) -> None:
        """
        Delete a file from Supabase Storage.

        Raises:
            StorageError: If the provider rejects the removal
        """
        try:
            client = get_client()
            client.storage.from_(bucket).remove([path])
        except AuthProviderError as e:
            raise StorageError(str(e))
        except Exception as e:
            logger.warning(f"Failed to delete file {bucket}/{path}: {e}")
            raise StorageError(f"Failed to delete file: {str(e)}")

        logger.info(f"File deleted: {bucket}/{path}")
