import io
import zipfile
from typing import Dict, List, Optional

import httpx

from src.config import Settings

EXPORT_URL = "https://export.test/api/export"
GRAPH_BASE_URL = "https://graph.test/v1.0"
AUTHORITY_HOST = "https://login.test"
UPLOAD_HOST = "upload.test"

TEST_PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"


def make_settings(**overrides) -> Settings:
    values = dict(
        CLIENT_ID="client-id",
        CLIENT_SECRET="client-secret",
        TENANT_ID="tenant",
        SITE_ID="site",
        DRIVE_ID="drive",
        GRAPH_BASE_URL=GRAPH_BASE_URL,
        AUTHORITY_HOST=AUTHORITY_HOST,
        EXPORT_URL=EXPORT_URL,
        EXPORT_USERNAME="svc-user",
        EXPORT_PASSWORD="svc-password",
        EXPORT_ALIAS="svc-alias",
        EXPORT_COMPANY_ID="company-1",
        EXPORT_API_TOKEN="api-token",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_docx(entries: Optional[Dict[str, bytes]] = None) -> bytes:
    entries = entries or {
        "[Content_Types].xml": b"<Types/>",
        "word/document.xml": b"<w:document>hello</w:document>",
    }
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


class FakeUpstream:
    """Plays the export service, the identity endpoint and Microsoft Graph at once."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.export_responses: Dict[str, httpx.Response] = {}
        self.fail_chunk_at: Optional[int] = None
        self.sessions = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if host == "export.test":
            filename = request.url.params["filename"]
            return self.export_responses.get(filename, httpx.Response(200, content=TEST_PDF_CONTENT))

        if host == "login.test":
            return httpx.Response(200, json={"access_token": "token-123", "token_type": "Bearer"})

        if host == UPLOAD_HOST:
            index = len(self.chunk_requests) - 1
            if self.fail_chunk_at is not None and index == self.fail_chunk_at:
                return httpx.Response(500, json={"error": {"code": "generalException"}})
            return httpx.Response(202, json={"nextExpectedRanges": []})

        if host == "graph.test":
            path = request.url.path
            if path.endswith(":/createUploadSession"):
                self.sessions += 1
                return httpx.Response(
                    200,
                    json={
                        "uploadUrl": f"https://{UPLOAD_HOST}/session/{self.sessions}",
                        "expirationDateTime": "2030-01-01T00:00:00Z",
                    },
                )
            name = path.split("root:/", 1)[1]
            return httpx.Response(200, json={"id": f"item-{name}", "name": name})

        return httpx.Response(404)

    def by_host(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    @property
    def export_requests(self) -> List[httpx.Request]:
        return self.by_host("export.test")

    @property
    def chunk_requests(self) -> List[httpx.Request]:
        return self.by_host(UPLOAD_HOST)

    @property
    def metadata_requests(self) -> List[httpx.Request]:
        return [r for r in self.by_host("graph.test") if r.method == "GET"]


