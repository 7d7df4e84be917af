from __future__ import annotations

import pytest

from myqris.crc import crc16_ccitt

STATIC_BODY = (
    "000201"
    "010211"
    "2657"
    "0011ID.DANA.WWW"
    "0118936009153022591481"
    "0209022591481"
    "0303UMI"
    "5144"
    "0014ID.CO.QRIS.WWW"
    "0215ID1020017611473"
    "0303UMI"
    "52045812"
    "5303360"
    "5802ID"
    "5912Warung Makan"
    "6013Kota Surabaya"
    "610560111"
    "62070703A01"
    "6304"
)


def with_crc(body: str) -> str:
    return body + crc16_ccitt(body)


@pytest.fixture
def static_payload() -> str:
    return with_crc(STATIC_BODY)


@pytest.fixture
def minimal_payload() -> str:
    return with_crc("0002010102115802ID5905Tokoh6005Medan61051234" + "6304")
