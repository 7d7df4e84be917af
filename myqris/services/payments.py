"""Dynamic payment payload building services."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..crc import split_crc
from ..monitoring import record_payment
from ..qris import AmountSpec, FeeType, MerchantInfo, build_payment, extract_info
from ..renderer import render_qr_payload

logger = logging.getLogger("myqris.payments")


@dataclass(slots=True)
class PaymentResult:
    payload: str
    crc: str
    amount: int
    fee: int
    total: int
    fee_type: FeeType
    merchant: MerchantInfo
    qr_png_base64: str | None = None
    data_url: str | None = None


class PaymentGenerator:
    def __init__(self, title: str | None = None):
        self.title = title

    def create_payment(
        self,
        *,
        payload: str,
        amount: int,
        fee: int | float = 0,
        fee_type: FeeType | str = FeeType.FLAT,
        render: bool = False,
    ) -> PaymentResult:
        spec = AmountSpec.create(amount, fee, fee_type)
        dynamic = build_payment(payload, spec)
        merchant = extract_info(dynamic)

        result = PaymentResult(
            payload=dynamic,
            crc=split_crc(dynamic)[1],
            amount=spec.amount,
            fee=spec.final_fee,
            total=spec.total,
            fee_type=spec.fee_type,
            merchant=merchant,
        )
        if render:
            rendered = render_qr_payload(dynamic, title=self.title or merchant.merchant_name)
            result.qr_png_base64 = rendered["png_base64"]
            result.data_url = rendered["data_url"]

        record_payment(spec.fee_type.value)
        logger.info(
            "payment payload generated",
            extra={"nmid": merchant.nmid, "total": spec.total, "rendered": render},
        )
        return result
