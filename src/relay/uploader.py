import logging
from typing import Any, Dict, Iterator, Tuple
from urllib.parse import quote

import httpx

from src.config import Settings
from src.errors import UploadStepError
from .schemas import UploadSession

logger = logging.getLogger("docrelay.uploader")


def iter_slices(total: int, chunk_size: int) -> Iterator[Tuple[int, int]]:
    """Yield consecutive ``(start, end)`` byte offsets, end exclusive, covering ``total`` bytes."""
    start = 0
    while start < total:
        end = min(start + chunk_size, total)
        yield start, end
        start = end


def _status_error(step: str, response: httpx.Response) -> UploadStepError:
    return UploadStepError(
        step,
        f"{step} failed with status {response.status_code}: {response.text[:200]}",
        status_code=response.status_code,
    )


def _json_body(step: str, response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        raise UploadStepError(step, f"{step} returned a non-JSON body", status_code=response.status_code)
    return body


def check_filename(filename: str) -> None:
    """Item names must stay at the drive root: no separators and no dot segments."""
    if not filename.strip() or "/" in filename or "\\" in filename or filename in (".", ".."):
        raise UploadStepError("validate", f"Invalid destination filename: {filename!r}")


class ChunkedUploader:
    """Uploads a buffer to a SharePoint drive through a Microsoft Graph upload session."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.settings = settings
        self.client = client
        self.chunk_size = settings.UPLOAD_CHUNK_SIZE
        self.drive_root = (
            f"{settings.GRAPH_BASE_URL}/sites/{settings.SITE_ID}/drives/{settings.DRIVE_ID}/root:"
        )

    def item_url(self, filename: str) -> str:
        return f"{self.drive_root}/{quote(filename, safe='')}"

    async def access_token(self) -> str:
        token_url = f"{self.settings.AUTHORITY_HOST}/{self.settings.TENANT_ID}/oauth2/v2.0/token"
        payload = {
            "client_id": self.settings.CLIENT_ID,
            "client_secret": self.settings.CLIENT_SECRET,
            "scope": self.settings.GRAPH_SCOPE,
            "grant_type": "client_credentials",
        }
        try:
            response = await self.client.post(token_url, data=payload)
        except httpx.HTTPError as e:
            raise UploadStepError("token", f"token request failed: {e}") from e
        if response.status_code != 200:
            raise _status_error("token", response)

        token = _json_body("token", response).get("access_token")
        if not isinstance(token, str) or not token.strip():
            raise UploadStepError("token", "token response did not contain an access token")
        return token

    async def create_session(self, filename: str, token: str) -> UploadSession:
        try:
            response = await self.client.post(
                f"{self.item_url(filename)}:/createUploadSession",
                json={"item": {"@microsoft.graph.conflictBehavior": "replace"}},
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise UploadStepError("create_session", f"create_session failed: {e}") from e
        if not response.is_success:
            raise _status_error("create_session", response)

        body = _json_body("create_session", response)
        upload_url = body.get("uploadUrl")
        if not upload_url:
            raise UploadStepError("create_session", "upload session response did not contain an uploadUrl")
        return UploadSession(upload_url=upload_url, expiration=body.get("expirationDateTime"))

    async def put_slice(self, session: UploadSession, token: str, buffer: bytes, start: int, end: int):
        total = len(buffer)
        try:
            response = await self.client.put(
                session.upload_url,
                content=buffer[start:end],
                headers={
                    "Content-Length": str(end - start),
                    "Content-Range": f"bytes {start}-{end - 1}/{total}",
                    "Authorization": f"Bearer {token}",
                },
            )
        except httpx.HTTPError as e:
            raise UploadStepError("upload_chunk", f"upload_chunk {start}-{end - 1}/{total} failed: {e}") from e
        if not response.is_success:
            raise _status_error("upload_chunk", response)

    async def fetch_metadata(self, filename: str, token: str) -> Dict[str, Any]:
        try:
            response = await self.client.get(
                self.item_url(filename),
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise UploadStepError("fetch_metadata", f"fetch_metadata failed: {e}") from e
        if not response.is_success:
            raise _status_error("fetch_metadata", response)
        return _json_body("fetch_metadata", response)

    async def upload(self, filename: str, buffer: bytes) -> Dict[str, Any]:
        """
        Upload ``buffer`` to ``filename`` at the drive root, replacing any existing item.

        Slices are sent one after another; the first failing slice aborts the
        upload and the session is left to expire.
        """
        if not buffer:
            raise UploadStepError("validate", "Refusing to upload an empty response")
        check_filename(filename)

        token = await self.access_token()
        session = await self.create_session(filename, token)

        for start, end in iter_slices(len(buffer), self.chunk_size):
            await self.put_slice(session, token, buffer, start, end)

        logger.info(f"Upload of {filename} completed ({len(buffer)} bytes)")
        return await self.fetch_metadata(filename, token)
