"""Relay endpoint for the upstream messages API."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.models import MessagesRequest
from backend.relay import AnthropicRelay

logger = logging.getLogger(__name__)


def setup_router(relay: AnthropicRelay) -> APIRouter:
    router = APIRouter(prefix="/api/anthropic", tags=["relay"])

    @router.post("/messages")
    async def relay_messages(request: MessagesRequest):
        """Forward the body upstream with the server-held credential.

        The response status and body are whatever upstream returned, or a
        500 with an ``error`` field when the relay itself failed.
        """
        status_code, body = await relay.forward(request.model_dump(exclude_unset=True))
        return JSONResponse(status_code=status_code, content=body)

    return router
