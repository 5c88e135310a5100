import logging

from agromart.services.file_service import FileService

logger = logging.getLogger(__name__)


class ImageAttachment:
    """Keep an uploaded image in step with the record that references it.

    The new file is written to disk on ``__enter__``. The caller then performs
    the record write and calls :meth:`commit` once it has been persisted, which
    deletes the image it replaced. If the block exits with an exception before
    :meth:`commit`, the staged file is deleted and the exception propagates.
    """

    def __init__(self, storage, upload_root, subfolder="", previous_path=None):
        self.storage = storage
        self.upload_root = upload_root
        self.subfolder = subfolder
        self.previous_path = previous_path
        self.path = None
        self.committed = False

    @property
    def staged(self):
        return self.path is not None

    def stage(self):
        self.path = FileService.save_image(self.storage, self.upload_root, self.subfolder)
        return self.path

    def commit(self):
        self.committed = True
        if self.staged and self.previous_path and self.previous_path != self.path:
            FileService.delete_file(self.previous_path, self.upload_root)

    def rollback(self):
        if self.staged and not self.committed:
            logger.info("Discarding staged upload %s", self.path)
            FileService.delete_file(self.path, self.upload_root)
            self.path = None

    def __enter__(self):
        self.stage()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.rollback()
        return False
