import pytest
from waterrights_core.codec import EncryptionCodec
from waterrights_core.errors import DecodeError


@pytest.mark.parametrize("value", [0, 1, 100, 0.01, 3.14159, 1234567.891, -42.5, 1e-9])
def test_roundtrip(value):
    assert EncryptionCodec.decode(EncryptionCodec.encode(value)) == pytest.approx(value)


def test_encoded_form_is_marked():
    enc = EncryptionCodec.encode(100)
    assert enc == "FHE-MTAw"  # base64("100")
    assert EncryptionCodec.is_encoded(enc)


def test_integral_float_renders_like_int():
    assert EncryptionCodec.encode(100.0) == EncryptionCodec.encode(100)


def test_fallback_decode_plain_number():
    assert EncryptionCodec.decode("3.14") == 3.14
    assert EncryptionCodec.decode("250") == 250


def test_not_confidential():
    # No key involved: whoever reads the stored value can read the number.
    import base64
    enc = EncryptionCodec.encode(77)
    assert base64.b64decode(enc[len("FHE-"):]) == b"77"


@pytest.mark.parametrize("bad", [
    "FHE-%%%", "FHE-YWJj", "not-a-number", "", None, 12,
    "NaN", "nan", "inf", "-Infinity", "1_000", "FHE-TmFO",
])
def test_malformed_raises_decode_error(bad):
    with pytest.raises(DecodeError):
        EncryptionCodec.decode(bad)


def test_decode_error_is_value_error():
    with pytest.raises(ValueError):
        EncryptionCodec.decode("FHE-!!")


def test_try_decode_logs_and_returns_none(caplog):
    assert EncryptionCodec.try_decode("FHE-YWJj") is None
    assert "undecodable" in caplog.text


def test_encode_rejects_non_numbers():
    with pytest.raises(TypeError):
        EncryptionCodec.encode("100")
    with pytest.raises(TypeError):
        EncryptionCodec.encode(True)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_encode_rejects_non_finite(value):
    with pytest.raises(ValueError):
        EncryptionCodec.encode(value)


def test_large_integer_encodes_exactly():
    assert EncryptionCodec.decode(EncryptionCodec.encode(10 ** 15)) == 10 ** 15
