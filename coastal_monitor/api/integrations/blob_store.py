import os
import uuid
import logging

import aiofiles

from coastal_monitor.api.integrations.managed_backend import CoreIntegrations
from coastal_monitor.api.models.errors import UploadFailure

logger = logging.getLogger(__name__)

MAX_MEDIA_BYTES = 10 * 1024 * 1024  # 10MB limit


class RemoteBlobStore:
    """Uploads media through the managed backend's file storage."""

    def __init__(self, core: CoreIntegrations):
        self.core = core

    async def upload(self, filename, content: bytes, content_type=None) -> str:
        result = await self.core.upload_file(filename, content, content_type)
        return result['file_url']


class LocalBlobStore:
    """Development store: writes media to disk, served by the app at /media/hazard."""

    url_prefix = "/media/hazard"

    def __init__(self, media_storage_path):
        self.media_storage_path = media_storage_path
        os.makedirs(self.media_storage_path, exist_ok=True)

    async def upload(self, filename, content: bytes, content_type=None) -> str:
        if len(content) > MAX_MEDIA_BYTES:
            raise UploadFailure(f"{filename} exceeds the 10MB limit")

        file_extension = filename.split('.')[-1] if filename and '.' in filename else ''
        unique_filename = f"{uuid.uuid4()}.{file_extension}" if file_extension else str(uuid.uuid4())
        file_path = os.path.join(self.media_storage_path, unique_filename)

        try:
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Error saving {filename} to {file_path}: {e}")
            raise UploadFailure(f"Could not store {filename}") from e

        return f"{self.url_prefix}/{unique_filename}"
