import logging
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from PIL import Image
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from agromart.errors import ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "webp"}
# Stored paths look like "uploads/listings/2024/05/01/<hex>.png" and are served from /uploads.
PUBLIC_PREFIX = "uploads"


class FileService:
    @staticmethod
    def _is_allowed(filename):
        return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS

    @staticmethod
    def has_file(storage):
        return bool(storage and storage.filename)

    @classmethod
    def save_image(cls, storage: FileStorage, upload_root: str, subfolder: str = ""):
        if not cls.has_file(storage):
            return None

        filename = secure_filename(storage.filename)
        if not filename or not cls._is_allowed(filename):
            raise ValidationFailed("Only image files are allowed!")

        # Verify actual image bytes to avoid extension spoofing.
        try:
            img = Image.open(storage.stream)
            img.verify()
            storage.stream.seek(0)
        except Exception as exc:
            raise ValidationFailed("Invalid image file.") from exc

        relative_folder = Path(subfolder) / datetime.now(timezone.utc).strftime("%Y/%m/%d")
        folder = Path(upload_root) / relative_folder
        folder.mkdir(parents=True, exist_ok=True)

        extension = filename.rsplit(".", 1)[1].lower()
        unique_filename = f"{uuid4().hex}.{extension}"
        storage.save(folder / unique_filename)

        return (Path(PUBLIC_PREFIX) / relative_folder / unique_filename).as_posix()

    @staticmethod
    def resolve(relative_path: str, upload_root: str):
        root = Path(upload_root).resolve()
        parts = Path(relative_path).parts
        if parts and parts[0] == PUBLIC_PREFIX:
            parts = parts[1:]
        candidate = root.joinpath(*parts).resolve()
        if candidate == root or root not in candidate.parents:
            return None
        return candidate

    @classmethod
    def delete_file(cls, relative_path: str, upload_root: str):
        """Remove a stored upload; returns False when nothing was removed."""
        if not relative_path:
            return False
        target = cls.resolve(relative_path, upload_root)
        if target is None:
            logger.warning("Refusing to delete path outside upload root: %s", relative_path)
            return False
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Could not delete upload %s: %s", relative_path, exc)
            return False
        return True
