"""CRC16-CCITT implementation."""
from __future__ import annotations

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF
CRC_LENGTH = 4


def crc16_ccitt(data: str) -> str:
    """Compute CRC16-CCITT-FALSE (0x1021, init 0xFFFF) over QRIS payload characters."""

    checksum = CRC16_INIT
    for ch in data:
        checksum ^= ord(ch) << 8
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return f"{checksum:04X}"


def split_crc(payload: str) -> tuple[str, str]:
    """Split a payload into its body and trailing checksum."""

    return payload[:-CRC_LENGTH], payload[-CRC_LENGTH:]
