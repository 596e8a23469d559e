import logging

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from .schemas import UploadRequest, UploadResponse, FailureResponse, CheckRequestResponse
from .service import DocumentRelay

logger = logging.getLogger("docrelay.routes")

relay_router = APIRouter()


def get_relay(request: Request) -> DocumentRelay:
    return request.app.state.relay


@relay_router.post(
    "/upload",
    response_model=UploadResponse,
    responses={500: {"model": FailureResponse}},
)
async def upload_files(
    request: Request,
    payload: UploadRequest,
    relay: DocumentRelay = Depends(get_relay),
):
    """
    Fetch every listed file from the export service and upload it to SharePoint.

    Files are handled one after another; a failing file is reported in
    `failedUploads` and does not stop the rest of the batch.
    """
    logger.info(f"API called from Referer: {request.headers.get('referer')}")
    logger.info(f"API called from Origin: {request.headers.get('origin')}")

    result = await relay.process_batch(payload.objectid, payload.files)
    return result.to_response()


@relay_router.post("/check-request", response_model=CheckRequestResponse)
async def check_request(request: Request):
    """
    Diagnostic endpoint: log everything about the incoming request and acknowledge it.
    """
    max_size = request.app.state.settings.CHECK_REQUEST_MAX_FILE_SIZE
    form = await request.form()

    logger.info(f"Request method: {request.method}")
    logger.info(f"Request url: {request.url}")
    logger.info(f"Request path: {request.url.path}")
    logger.info(f"Request query: {dict(request.query_params)}")
    logger.info(f"Request path params: {request.path_params}")
    logger.info(f"Request headers: {dict(request.headers)}")
    logger.info(f"Request cookies: {request.cookies}")
    logger.info(f"Request client: {request.client}")
    logger.info(f"Request scheme: {request.url.scheme}")
    logger.info(f"Request hostname: {request.url.hostname}")
    logger.info(f"Request user-agent: {request.headers.get('user-agent')}")
    logger.info(f"Request content-type: {request.headers.get('content-type')}")
    logger.info(f"Request content-length: {request.headers.get('content-length')}")

    fields = {key: value for key, value in form.multi_items() if not isinstance(value, UploadFile)}
    logger.info(f"Request body: {fields}")

    files = [value for value in form.getlist("files") if isinstance(value, UploadFile)]
    if files:
        logger.info(f"Files received: {len(files)}")
        for index, upload in enumerate(files, start=1):
            logger.info(f"File {index}:")
            logger.info(f"  - Original name: {upload.filename}")
            logger.info("  - Field name: files")
            logger.info(f"  - Content type: {upload.content_type}")
            logger.info(f"  - Size: {upload.size} bytes")
            if upload.size is not None and upload.size > max_size:
                logger.warning(f"  - {upload.filename} exceeds the {max_size} byte limit")
    else:
        logger.info("No files received")

    return CheckRequestResponse()
