"""FastAPI application for myqris."""
from __future__ import annotations

import base64
import binascii
import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from .config import settings
from .crc import crc16_ccitt, split_crc
from .logging_conf import configure_logging
from .middleware import RequestLoggingMiddleware
from .monitoring import metrics_payload, record_service_error
from .qris import extract_info, is_valid
from .renderer import render_qr_payload, render_terminal
from .schemas import (
    DecodeRequest,
    DecodeResponse,
    MerchantInfoResponse,
    PaymentRequest,
    PaymentResponse,
    PayloadRequest,
    RenderRequest,
    RenderResponse,
    ValidateResponse,
)
from .services.errors import ServiceError, ValidationError
from .services.payments import PaymentGenerator
from .services.reader import read_qr_from_bytes, read_qr_from_url

app = FastAPI(title="myqris", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

logger = logging.getLogger("myqris.api")


def _warn_insecure_defaults() -> None:
    if settings.api_key == "dev-secret-key":
        logger.warning(
            "api key uses the default value",
            extra={"config_key": "api_key", "environment": settings.environment},
        )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    _warn_insecure_defaults()


async def require_api_key(x_api_key: str = Header(...)) -> None:
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.warning(
        "service error",
        extra={"code": exc.code, "error": exc.message, "path": route_path, "method": request.method},
    )
    record_service_error(exc.code, route_path)
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "message": exc.message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.exception(
        "unhandled exception",
        extra={"path": route_path, "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


def _decode_base64_image(data: str) -> bytes:
    if data.startswith("data:"):
        data = data.partition(",")[2]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("image_base64 is not valid base64") from exc


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post("/v1/qris/validate", response_model=ValidateResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def validate_qris(payload: PayloadRequest) -> ValidateResponse:
    body, crc = split_crc(payload.payload)
    return ValidateResponse(valid=is_valid(payload.payload), crc=crc, expected_crc=crc16_ccitt(body))


@app.post("/v1/qris/info", response_model=MerchantInfoResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def merchant_info(payload: PayloadRequest) -> MerchantInfoResponse:
    info = extract_info(payload.payload)
    return MerchantInfoResponse(**info.to_dict())


@app.post("/v1/qris/payment", response_model=PaymentResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def create_payment(payload: PaymentRequest) -> PaymentResponse:
    generator = PaymentGenerator()
    result = generator.create_payment(
        payload=payload.payload,
        amount=payload.amount,
        fee=payload.fee,
        fee_type=payload.fee_type,
        render=payload.render,
    )

    return PaymentResponse(
        payload=result.payload,
        crc=result.crc,
        amount=result.amount,
        fee=result.fee,
        total=result.total,
        fee_type=result.fee_type.value,
        merchant=MerchantInfoResponse(**result.merchant.to_dict()),
        qr_png_base64=result.qr_png_base64,
        data_url=result.data_url,
    )


@app.post("/v1/qris/decode", response_model=DecodeResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def decode_qr(payload: DecodeRequest) -> DecodeResponse:
    if payload.url:
        text = read_qr_from_url(payload.url)
    else:
        text = read_qr_from_bytes(_decode_base64_image(payload.image_base64 or ""))
    return DecodeResponse(payload=text, valid=is_valid(text))


@app.post("/v1/qris/render", response_model=RenderResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
def render_qr(payload: RenderRequest) -> RenderResponse:
    if payload.format == "terminal":
        content = render_terminal(payload.payload)
    else:
        content = render_qr_payload(payload.payload, title=payload.title)["data_url"]
    return RenderResponse(format=payload.format, content=content)
