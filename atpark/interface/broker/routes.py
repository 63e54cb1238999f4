"""Upload grant routes."""

import logfire

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from atpark.adapter.storage.presign import ObjectPresigner, PresignError, make_object_key
from atpark.config import Settings

router = APIRouter(tags=["upload"], route_class=DishkaRoute)


@router.post("/")
async def create_upload_url(
    request: Request,
    presigner: FromDishka[ObjectPresigner],
    settings: FromDishka[Settings],
) -> JSONResponse:
    """Issue a single-use upload URL for one object.

    Body: ``{"filename": str, "contentType": str}``. A body that is not a
    JSON object is treated like one with both fields missing.

    Returns:
        ``{"success": true, "data": {"uploadUrl", "publicUrl", "key"}}``
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict):
        payload = {}
    filename = payload.get("filename")
    content_type = payload.get("contentType")

    if not (isinstance(filename, str) and filename) or not (
        isinstance(content_type, str) and content_type
    ):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Missing filename or contentType"},
        )

    key = make_object_key(filename)

    with logfire.span("broker.create_upload_url", key=key, content_type=content_type):
        try:
            # boto3 signing is synchronous
            upload_url = await run_in_threadpool(presigner.presign_put, key, content_type)
        except PresignError as e:
            logfire.error("Error generating upload URL", key=key, error=str(e))
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"success": False, "error": str(e) or "Internal server error"},
            )

        logfire.info("Upload URL issued", key=key)

    return JSONResponse(
        content={
            "success": True,
            "data": {
                "uploadUrl": upload_url,
                "publicUrl": f"{settings.storage.public_bucket_url}/{key}",
                "key": key,
            },
        }
    )
