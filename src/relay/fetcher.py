import os
import logging
from typing import Callable, Dict, Optional

import httpx

from src.config import Settings
from src.errors import TransportError, UnsupportedFormatError, EmptyResponseError
from .schemas import UploadParams
from . import archive

logger = logging.getLogger("docrelay.fetcher")


def file_extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


class SourceFetcher:
    """Pulls file bytes out of the legacy document-export service."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.url = settings.EXPORT_URL
        self.client = client
        self.strategies: Dict[str, Callable] = {
            ".pdf": self.fetch_binary,
            ".docx": self.fetch_archive,
            ".xlsx": self.fetch_archive,
        }

    async def fetch(self, params: UploadParams) -> bytes:
        extension = file_extension(params.filename)
        strategy = self.strategies.get(extension)
        if strategy is None:
            raise UnsupportedFormatError(extension)
        return await strategy(params)

    async def _post(self, params: UploadParams, headers: Optional[dict] = None) -> httpx.Response:
        logger.debug(
            f"Requesting {params.filename} (objectid={params.objectid}, fieldid={params.fieldid})"
        )
        try:
            response = await self.client.post(
                self.url,
                params=params.model_dump(),
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to retrieve the file: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Failed to retrieve {params.filename}. Status code: {response.status_code}")
            raise TransportError(
                f"Failed to retrieve the file. Status code: {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            logger.warning(f"Received an empty response for {params.filename}")
            raise EmptyResponseError()
        return response

    async def fetch_binary(self, params: UploadParams) -> bytes:
        response = await self._post(params)
        return response.content

    async def fetch_archive(self, params: UploadParams) -> bytes:
        response = await self._post(params, headers={"Accept": "application/zip"})
        logger.debug(f"Received {len(response.content)} archive bytes for {params.filename}")
        return archive.unwrap(response.content)
