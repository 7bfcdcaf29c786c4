"""
ANGAGU Backend — Error Table and Envelope Tests
================================================
"""

import pytest

from angagu.error_codes import ERROR_MESSAGES, ErrCode, message_for
from angagu.exceptions import ApiError
from angagu.schemas.common import Envelope, error_body, ok


def test_every_code_has_a_message():
    """Every ErrCode has an entry in the message table."""
    for code in ErrCode:
        assert ERROR_MESSAGES[code]


def test_table_is_read_only():
    """The message table cannot be modified at runtime."""
    with pytest.raises(TypeError):
        ERROR_MESSAGES[999] = "nope"  # type: ignore[index]


def test_codes_are_stable():
    """Code values match the published numbers."""
    assert ErrCode.INVALID_EMAIL == 101
    assert ErrCode.WRONG_PASSWORD == 405
    assert ErrCode.INVALID_ADDRESS == 501
    assert ErrCode.NOT_OWNER == 502
    assert ErrCode.AMBIGUOUS_RESOURCE == 503
    assert ErrCode.DUPLICATE_ACCOUNT == 306
    assert ErrCode.SIGNUP_FAILED == 307


def test_unknown_code_falls_back_to_zero_message():
    """An unknown code gets the generic message."""
    assert message_for(9999) == ERROR_MESSAGES[ErrCode.UNKNOWN]


def test_error_body_shape():
    """error_body builds the error envelope with extra fields."""
    body = error_body(ErrCode.ADDRESS_POST_FAILED, {"err": "IntegrityError"})
    assert body == {
        "status": "error",
        "data": {"errCode": 301, "err": "IntegrityError"},
        "message": message_for(301),
    }


def test_success_envelope():
    """ok() wraps data in the success envelope."""
    assert ok({"id": 1}) == {"status": "success", "data": {"id": 1}, "message": "OK"}
    assert Envelope[int](data=5).model_dump() == {"status": "success", "data": 5, "message": "OK"}


def test_api_error_carries_message_from_table():
    """ApiError takes its message from the table."""
    exc = ApiError(404, ErrCode.INVALID_PHONE)
    assert exc.status_code == 404
    assert exc.err_code == 104
    assert exc.message == message_for(104)
    assert exc.extra == {}
