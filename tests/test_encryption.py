import json

import pytest

from app.core import encryption
from app.core.encryption import EncryptionError, decrypt, decrypt_qr_data, encrypt, encrypt_qr_data


@pytest.mark.parametrize("value", ["", "https://example.com", "WIFI:T:WPA;S:Net;P:pä$$;H:false;;", "😀" * 50])
def test_round_trip(value):
    assert decrypt(encrypt(value)) == value
    assert decrypt_qr_data(encrypt_qr_data(value)) == value


def test_envelope_shape_and_fresh_iv():
    first = encrypt("same")
    second = encrypt("same")
    assert set(first) == {"encrypted", "iv", "authTag"}
    assert len(bytes.fromhex(first["iv"])) == 12
    assert len(bytes.fromhex(first["authTag"])) == 16
    assert first["iv"] != second["iv"]


def test_tampered_ciphertext_fails():
    envelope = encrypt("secret destination")
    flipped = bytearray(bytes.fromhex(envelope["encrypted"]))
    flipped[0] ^= 0x01
    envelope["encrypted"] = flipped.hex()
    with pytest.raises(EncryptionError):
        decrypt(envelope)


def test_plaintext_is_not_an_envelope():
    with pytest.raises(EncryptionError):
        decrypt_qr_data("https://legacy.example.com")
    with pytest.raises(EncryptionError):
        decrypt_qr_data(json.dumps(["not", "a", "dict"]))


def test_invalid_key_rejected(monkeypatch):
    monkeypatch.setattr(encryption.settings, "ENCRYPTION_KEY", "abcd")
    with pytest.raises(EncryptionError):
        encrypt("x")


def test_missing_key_rejected(monkeypatch):
    monkeypatch.setattr(encryption.settings, "ENCRYPTION_KEY", "")
    with pytest.raises(EncryptionError):
        encrypt_qr_data("x")
