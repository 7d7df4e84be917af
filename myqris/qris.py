"""QRIS payload validation, merchant info extraction and amount injection."""
from __future__ import annotations

import enum
import logging
import math
import re
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from numbers import Real

from .crc import CRC_LENGTH, crc16_ccitt, split_crc
from .services.errors import (
    ValidationError,
    err_bad_amount,
    err_bad_fee,
    err_bad_payload,
    err_internal,
    err_invalid_crc,
)
from .tlv import TLVItem, build_tlv

logger = logging.getLogger("myqris.qris")

TAG_AMOUNT = "54"
COUNTRY_MARKER = "5802ID"
STATIC_POI = "010211"
DYNAMIC_POI = "010212"

SCHEME_A01 = "A01"
SCHEME_DEFAULT = "01"
NNS_UNKNOWN = "unknown"
NNS_LENGTH = 8

_NNS_PATTERN = re.compile(r"0118(.*?)ID")


class FeeType(str, enum.Enum):
    FLAT = "flat"
    PERCENTAGE = "percentage"


@dataclass(frozen=True)
class MerchantInfo:
    id: str
    nns: str
    nmid: str
    merchant_name: str
    merchant_city: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class AmountSpec:
    """Validated amount instruction: base amount plus an optional fee."""

    amount: int
    fee: int | float = 0
    fee_type: FeeType = FeeType.FLAT

    @classmethod
    def create(cls, amount: object, fee: object = 0, fee_type: object = FeeType.FLAT) -> "AmountSpec":
        if isinstance(amount, bool) or not isinstance(amount, Real) or not math.isfinite(amount) or amount <= 0:
            raise err_bad_amount("Amount must be a positive number")
        if not float(amount).is_integer():
            raise err_bad_amount("Amount must be an integer")
        if isinstance(fee, bool) or not isinstance(fee, Real) or not math.isfinite(fee) or fee < 0:
            raise err_bad_fee()
        try:
            kind = FeeType(fee_type)
        except ValueError:
            raise ValidationError("Invalid fee type, must be 'flat' or 'percentage'") from None
        if kind is FeeType.PERCENTAGE and fee > 100:
            raise err_bad_fee("Percentage fee cannot exceed 100%")
        if kind is FeeType.FLAT and not float(fee).is_integer():
            raise err_bad_fee("Flat fee must be an integer")
        return cls(amount=int(amount), fee=fee, fee_type=kind)

    @property
    def final_fee(self) -> int:
        if self.fee > 0 and self.fee_type is FeeType.PERCENTAGE:
            share = Decimal(str(self.fee)) / 100 * self.amount
            return int(share.quantize(Decimal(1), rounding=ROUND_HALF_UP))
        return int(self.fee)

    @property
    def total(self) -> int:
        return self.amount + self.final_fee


def is_valid(payload: object) -> bool:
    """Return True when the trailing 4 characters match the CRC16 of the body."""

    if not isinstance(payload, str) or len(payload) < CRC_LENGTH:
        return False
    body, crc = split_crc(payload)
    return crc == crc16_ccitt(body)


def _require_valid(payload: object) -> str:
    if not payload or not isinstance(payload, str):
        raise err_bad_payload()
    if not is_valid(payload):
        raise err_invalid_crc()
    return payload


def substring_between(text: str, start: str, end: str) -> str:
    """Return the window after the first ``start`` up to the next ``end`` (or the rest of ``text``)."""

    begin = text.find(start)
    if begin == -1:
        return ""
    begin += len(start)
    finish = text.find(end, begin)
    if finish == -1:
        return text[begin:]
    return text[begin:finish]


def extract_info(payload: object) -> MerchantInfo:
    """Locate merchant fields in a validated payload by their literal markers."""

    qris = _require_valid(payload)

    scheme_id = SCHEME_A01 if SCHEME_A01 in qris else SCHEME_DEFAULT
    nmid = "ID" + substring_between(qris, "15ID", "0303")

    # The city lookup needs the name exactly as it appears in the payload.
    raw_name = substring_between(qris, "ID59", "60")[2:]
    merchant_city = substring_between(qris, raw_name + "60", "610")[2:]

    matches = _NNS_PATTERN.findall(qris)
    nns = matches[-1][:NNS_LENGTH] if matches else NNS_UNKNOWN

    info = MerchantInfo(
        id=scheme_id,
        nns=nns,
        nmid=nmid,
        merchant_name=raw_name.strip().upper(),
        merchant_city=merchant_city,
    )
    logger.debug("merchant info extracted", extra={"nmid": info.nmid, "scheme_id": info.id})
    return info


def make_payment(payload: object, amount: object, fee: object = 0, fee_type: object = FeeType.FLAT) -> str:
    """Turn a static payload into a dynamic one carrying ``amount`` plus fee in tag 54."""

    qris = _require_valid(payload)
    return _inject_amount(qris, AmountSpec.create(amount, fee, fee_type))


def build_payment(payload: object, spec: AmountSpec) -> str:
    """Inject an already validated ``AmountSpec`` into a static payload."""

    qris = _require_valid(payload)
    return _inject_amount(qris, spec)


def _inject_amount(qris: str, spec: AmountSpec) -> str:
    body, _ = split_crc(qris)
    total = spec.total
    if total <= 0:
        raise ValidationError("Total payment must be greater than zero")

    head, marker, tail = body.replace(STATIC_POI, DYNAMIC_POI).partition(COUNTRY_MARKER)
    if not marker:
        raise ValidationError(f"QR code is missing the {COUNTRY_MARKER} country marker")

    fragment = build_tlv([TLVItem(tag=TAG_AMOUNT, value=str(total)), TLVItem(tag="58", value="ID")])
    rebuilt = head.strip() + fragment + tail.strip()
    result = rebuilt + crc16_ccitt(rebuilt)

    if not is_valid(result):
        raise err_internal()

    logger.debug(
        "payment payload built",
        extra={"amount": spec.amount, "fee": spec.final_fee, "fee_type": spec.fee_type.value, "total": total},
    )
    return result
