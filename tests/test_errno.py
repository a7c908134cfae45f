import pytest

from pudding.errno import (
    DuplicateMessageError,
    RPCError,
    StatusCode,
    bad_request,
    internal_error,
)

MESSAGE = "can not find trigger by id"


def _detail(reason):
    return {"reason": reason, "domain": "detail1", "metadata": {"id": "0"}}


@pytest.mark.parametrize(
    "build, code, label",
    [
        (internal_error, StatusCode.INTERNAL, "Internal"),
        (bad_request, StatusCode.INVALID_ARGUMENT, "InvalidArgument"),
    ],
)
def test_no_detail(build, code, label):
    err = build(MESSAGE)
    assert str(err) == str(RPCError(code, MESSAGE))
    assert str(err) == f"rpc error: code = {label} desc = {MESSAGE}"
    assert err.code is code
    assert err.details == ()


@pytest.mark.parametrize("build", [internal_error, bad_request])
def test_one_detail(build):
    detail1 = _detail("test_reason")
    err = build(MESSAGE, detail1)
    assert err.message == MESSAGE
    assert err.details[0] == detail1


@pytest.mark.parametrize("build", [internal_error, bad_request])
def test_two_details(build):
    detail1 = _detail("test_reason")
    detail2 = _detail("detail2")
    err = build(MESSAGE, detail1, detail2)
    assert err.details == (detail1, detail2)


def test_error_can_be_raised():
    err = internal_error(MESSAGE)
    assert err.code is StatusCode.INTERNAL
    assert err.message == MESSAGE
    with pytest.raises(RPCError, match="code = Internal desc = can not find trigger by id"):
        raise err


def test_duplicate_message_error():
    assert str(DuplicateMessageError()) == "duplicate message key"
    with pytest.raises(DuplicateMessageError, match="duplicate message key"):
        raise DuplicateMessageError()