"""Catch-all proxy route; every ``/api`` request goes through the RequestForwarder."""

from __future__ import annotations

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Request
from starlette.responses import Response

from services.api_gateway_service.implementations.request_forwarder import RequestForwarder
from services.api_gateway_service.models import HttpMethod

router = APIRouter()

PROXY_METHODS = [method.value for method in HttpMethod]


@router.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
@inject
async def forward_request(
    path: str,
    request: Request,
    forwarder: FromDishka[RequestForwarder],
) -> Response:
    return await forwarder.handle(request)
