"""Pydantic schemas for API contracts."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, StrictFloat, StrictInt, model_validator


class PayloadRequest(BaseModel):
    payload: str = Field(description="Full QRIS payload string including CRC")


class ValidateResponse(BaseModel):
    valid: bool
    crc: str
    expected_crc: str


class MerchantInfoResponse(BaseModel):
    id: str
    nns: str
    nmid: str
    merchant_name: str
    merchant_city: str


class PaymentRequest(BaseModel):
    payload: str = Field(description="Static QRIS payload string")
    amount: StrictInt | StrictFloat
    fee: StrictInt | StrictFloat = 0
    fee_type: str = Field(default="flat", description="'flat' or 'percentage'")
    render: bool = False


class PaymentResponse(BaseModel):
    payload: str
    crc: str
    amount: int
    fee: int
    total: int
    fee_type: str
    merchant: MerchantInfoResponse
    qr_png_base64: str | None = None
    data_url: str | None = None


class DecodeRequest(BaseModel):
    image_base64: str | None = Field(default=None, description="Base64 image or data URL")
    url: str | None = None

    @model_validator(mode="after")
    def _one_source(self) -> "DecodeRequest":
        if bool(self.image_base64) == bool(self.url):
            raise ValueError("Provide exactly one of image_base64 or url")
        return self


class DecodeResponse(BaseModel):
    payload: str
    valid: bool


class RenderRequest(BaseModel):
    payload: str = Field(min_length=1)
    title: str | None = Field(default=None, max_length=64)
    format: Literal["data_url", "terminal"] = "data_url"


class RenderResponse(BaseModel):
    format: str
    content: str
