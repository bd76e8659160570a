"""
Disk storage for uploaded event media.

Files land in the configured upload directory under a uuid4-prefixed name and
are referred to by their public path, e.g. ``uploads/3f2a...-beach.jpg``,
always with forward slashes.
"""
import os
import re
import uuid
from typing import Dict, Iterable, List, Optional

from fastapi import UploadFile, status

from api.errors import MediaIngestionError
from utils.logger import get_logger

logger = get_logger(__name__)

MEDIA_FIELDS = ("photos", "videos")
CHUNK_SIZE = 1024 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: Optional[str]) -> str:
    """Strip directories and characters that have no place in a stored name."""
    base = os.path.basename((filename or "").replace("\\", "/"))
    base = _UNSAFE_CHARS.sub("_", base).strip("._")
    return base or "file"


class MediaStorage:
    def __init__(self, upload_dir: str, url_prefix: str = "uploads",
                 max_files_per_field: int = 10, max_request_bytes: int = 100 * 1024 * 1024):
        self.upload_dir = os.path.abspath(upload_dir)
        self.url_prefix = url_prefix.strip("/\\").replace("\\", "/")
        self.max_files_per_field = max_files_per_field
        self.max_request_bytes = max_request_bytes

    @classmethod
    def from_config(cls, config) -> "MediaStorage":
        return cls(
            upload_dir=config.UPLOAD_DIR,
            url_prefix=config.MEDIA_URL_PREFIX,
            max_files_per_field=config.MEDIA_MAX_FILES_PER_FIELD,
            max_request_bytes=config.MEDIA_MAX_REQUEST_BYTES,
        )

    def ensure_directory(self) -> None:
        os.makedirs(self.upload_dir, exist_ok=True)

    def public_path(self, stored_name: str) -> str:
        if not self.url_prefix:
            return stored_name
        return f"{self.url_prefix}/{stored_name}"

    def local_path(self, public_path: str) -> str:
        """Map a stored public path back to its file in the upload directory."""
        name = os.path.basename(public_path.replace("\\", "/"))
        return os.path.join(self.upload_dir, name)

    async def save_uploads(self, uploads: Dict[str, Optional[List[UploadFile]]]) -> Dict[str, List[str]]:
        """
        Persist every file of a multipart request, keyed by form field.

        Either all files are stored or none are: on any failure the files
        already written for this request are removed and MediaIngestionError
        is raised.

        Returns:
            dict: field name -> list of public paths, one entry per field in
            MEDIA_FIELDS (empty list when nothing was uploaded for it).
        """
        batches = {}
        for field in MEDIA_FIELDS:
            files = [f for f in (uploads.get(field) or []) if f is not None and f.filename]
            if len(files) > self.max_files_per_field:
                raise MediaIngestionError(
                    f"Too many files for '{field}': at most {self.max_files_per_field} allowed"
                )
            batches[field] = files

        self.ensure_directory()
        stored = {field: [] for field in MEDIA_FIELDS}
        written = []
        total_bytes = 0
        try:
            for field in MEDIA_FIELDS:
                for upload in batches[field]:
                    stored_name = f"{uuid.uuid4().hex}-{safe_filename(upload.filename)}"
                    target = os.path.join(self.upload_dir, stored_name)
                    written.append(target)
                    with open(target, "wb") as out:
                        while True:
                            chunk = await upload.read(CHUNK_SIZE)
                            if not chunk:
                                break
                            total_bytes += len(chunk)
                            if total_bytes > self.max_request_bytes:
                                raise MediaIngestionError(
                                    f"Upload exceeds the {self.max_request_bytes // (1024 * 1024)} MB request limit",
                                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                                )
                            out.write(chunk)
                    stored[field].append(self.public_path(stored_name))
        except MediaIngestionError:
            self._discard(written)
            raise
        except OSError as e:
            self._discard(written)
            logger.error(f"Failed to store upload: {e}", exc_info=True)
            raise MediaIngestionError(
                f"Failed to store upload: {e}",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            ) from e

        if written:
            logger.info(
                f"Stored {len(stored['photos'])} photo(s) and {len(stored['videos'])} video(s), {total_bytes} bytes"
            )
        return stored

    def delete(self, public_paths: Iterable[str]) -> int:
        """Remove stored media; returns how many files were actually deleted."""
        deleted = 0
        for path in public_paths:
            local = self.local_path(path)
            try:
                os.remove(local)
                deleted += 1
            except FileNotFoundError:
                logger.warning(f"Media file already missing: {path}")
            except OSError as e:
                logger.error(f"Could not delete media file {path}: {e}")
        return deleted

    def _discard(self, local_paths: Iterable[str]) -> None:
        for local in local_paths:
            try:
                os.remove(local)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error(f"Could not clean up partial upload {local}: {e}")
