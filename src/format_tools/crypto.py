"""AES-256-CBC protection for access-controlled templates.

Blob layout: a 16-byte IV followed by PKCS#7-padded ciphertext. The key is the
SHA-256 digest of a UTF-8 passphrase.
"""

from __future__ import annotations

import hashlib
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import DecryptionError

IV_SIZE = 16
BLOCK_BITS = 128


def derive_key(passphrase: str) -> bytes:
    return hashlib.sha256(passphrase.encode("utf-8")).digest()


def decrypt_bytes(data: bytes, passphrase: str | None) -> bytes:
    if not passphrase:
        raise DecryptionError("Decryption key is missing")
    if len(data) < IV_SIZE:
        raise DecryptionError("Encrypted content is too short")
    iv, ciphertext = data[:IV_SIZE], data[IV_SIZE:]
    if not ciphertext or len(ciphertext) % (BLOCK_BITS // 8):
        raise DecryptionError("Failed to decrypt protected content")

    decryptor = Cipher(algorithms.AES(derive_key(passphrase)), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise DecryptionError("Failed to decrypt protected content") from exc


def encrypt_bytes(data: bytes, passphrase: str, *, iv: bytes | None = None) -> bytes:
    iv = iv if iv is not None else os.urandom(IV_SIZE)
    if len(iv) != IV_SIZE:
        raise ValueError(f"IV must be {IV_SIZE} bytes")
    padder = padding.PKCS7(BLOCK_BITS).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(derive_key(passphrase)), modes.CBC(iv)).encryptor()
    return iv + encryptor.update(padded) + encryptor.finalize()


__all__ = ["decrypt_bytes", "encrypt_bytes", "derive_key", "IV_SIZE"]
