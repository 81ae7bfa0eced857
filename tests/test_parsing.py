"""
Tests for delimited-text parsing
"""

import numpy as np
import pytest

from backend.parsing import decode_payload, parse_delimited
from backend.preprocessing import InsufficientDataError


def test_parse_comma(csv_quadratic):
    x, y = parse_delimited(csv_quadratic)

    np.testing.assert_array_equal(x, [0, 1, 2, 3, 4])
    np.testing.assert_array_equal(y, [0, 1, 4, 9, 16])


def test_parse_semicolon():
    x, y = parse_delimited("x;y\n0;1.5\n1;2.5\n2;3.5\n")

    np.testing.assert_array_equal(x, [0, 1, 2])
    np.testing.assert_array_equal(y, [1.5, 2.5, 3.5])


def test_parse_tab():
    x, y = parse_delimited("x\ty\n1\t10\n2\t20\n")

    np.testing.assert_array_equal(x, [1, 2])
    np.testing.assert_array_equal(y, [10, 20])


def test_parse_trims_headers_and_values():
    x, y = parse_delimited(" x , y \n 1 , 2 \n3, 4\n")

    np.testing.assert_array_equal(x, [1, 3])
    np.testing.assert_array_equal(y, [2, 4])


def test_parse_skips_invalid_rows():
    x, y = parse_delimited("x,y\n0,0\nabc,1\n\n1,2\n2,\n3,3\n")

    np.testing.assert_array_equal(x, [0, 1, 3])
    np.testing.assert_array_equal(y, [0, 2, 3])


def test_parse_ignores_extra_columns():
    x, y = parse_delimited("label,x,y\na,0,1\nb,1,2\n")

    np.testing.assert_array_equal(x, [0, 1])
    np.testing.assert_array_equal(y, [1, 2])


def test_parse_single_row_is_insufficient():
    with pytest.raises(InsufficientDataError, match=r"\(1 found\)"):
        parse_delimited("x,y\n1,2\n")


def test_parse_missing_columns_is_insufficient():
    with pytest.raises(InsufficientDataError, match=r"\(0 found\)"):
        parse_delimited("a,b\n1,2\n3,4\n")


def test_parse_empty_payload_is_insufficient():
    with pytest.raises(InsufficientDataError):
        parse_delimited("")


def test_decode_strips_bom():
    content = decode_payload(b"\xef\xbb\xbfx,y\n1,2\n3,4\n")

    x, _ = parse_delimited(content)
    np.testing.assert_array_equal(x, [1, 3])


def test_decode_replaces_invalid_bytes():
    content = decode_payload(b"x,y\n1,2\n\xff\xfe,3\n4,5\n")

    assert "\ufffd" in content
    x, y = parse_delimited(content)
    np.testing.assert_array_equal(x, [1, 4])
    np.testing.assert_array_equal(y, [2, 5])


def test_decode_binary_payload_is_insufficient():
    with pytest.raises(InsufficientDataError):
        parse_delimited(decode_payload(b"\xff\xfe\xfa\x00"))
