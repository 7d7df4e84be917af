from __future__ import annotations

import re

import pytest

from myqris.crc import crc16_ccitt, split_crc
from myqris.qris import is_valid

from .conftest import STATIC_BODY


def test_known_check_value():
    assert crc16_ccitt("123456789") == "29B1"


def test_empty_string_is_initial_value():
    assert crc16_ccitt("") == "FFFF"


@pytest.mark.parametrize("body", ["", "0", "000201", "ABCDEFGHIJ", STATIC_BODY, "x" * 512])
def test_output_is_four_uppercase_hex_digits(body):
    crc = crc16_ccitt(body)
    assert re.fullmatch(r"[0-9A-F]{4}", crc)
    assert crc16_ccitt(body) == crc


def test_split_crc():
    assert split_crc("BODY1A2B") == ("BODY", "1A2B")


@pytest.mark.parametrize("body", ["", "a", "00020101021", STATIC_BODY])
def test_appended_crc_validates(body):
    assert is_valid(body + crc16_ccitt(body))


def test_single_checksum_flip_is_detected(static_payload):
    body, crc = split_crc(static_payload)
    for idx in range(4):
        replacement = "0" if crc[idx] != "0" else "1"
        tampered = body + crc[:idx] + replacement + crc[idx + 1 :]
        assert not is_valid(tampered)


def test_body_change_is_detected(static_payload):
    assert not is_valid(static_payload.replace("Warung", "Wareng"))


@pytest.mark.parametrize("payload", ["", "0000", "abc", None, 12345])
def test_degenerate_input_is_invalid(payload):
    assert is_valid(payload) is False


def test_lowercase_checksum_is_rejected(static_payload):
    body, crc = split_crc(static_payload)
    if crc.lower() == crc:
        pytest.skip("checksum has no letters")
    assert not is_valid(body + crc.lower())
