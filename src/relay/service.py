import logging
from typing import List

import httpx

from src.config import Settings
from src.errors import RelayError
from .fetcher import SourceFetcher
from .uploader import ChunkedUploader, check_filename
from .schemas import BatchResult, FileDescriptor, UploadParams

logger = logging.getLogger("docrelay.service")


class DocumentRelay:
    """Fetches each requested file from the export service and re-uploads it to SharePoint."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.settings = settings
        self.fetcher = SourceFetcher(settings, client)
        self.uploader = ChunkedUploader(settings, client)

    async def relay_file(self, objectid: str, descriptor: FileDescriptor):
        check_filename(descriptor.filename)
        params = UploadParams.build(self.settings, objectid, descriptor)
        file_buffer = await self.fetcher.fetch(params)
        metadata = await self.uploader.upload(descriptor.filename, file_buffer)
        logger.info(f"Stored {descriptor.filename} as item {metadata.get('id')}")
        return metadata

    async def process_batch(self, objectid: str, files: List[FileDescriptor]) -> BatchResult:
        """
        Relay every descriptor in order, one at a time.

        A failing file is recorded in the result and never stops the batch.
        """
        result = BatchResult()

        for descriptor in files:
            try:
                await self.relay_file(objectid, descriptor)
            except RelayError as e:
                logger.error(f"Error processing file {descriptor.filename}: {e.message}")
                result.record_failure(descriptor.filename, e.message)
                continue
            except Exception as e:
                message = str(e) or e.__class__.__name__
                logger.exception(f"Unexpected error processing file {descriptor.filename}")
                result.record_failure(descriptor.filename, message)
                continue
            result.record_success(descriptor.filename)

        logger.info(
            f"Batch for object {objectid} finished: "
            f"{len(result.successful)} succeeded, {len(result.failed)} failed"
        )
        return result
