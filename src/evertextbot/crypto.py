# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Decrypt access codes stored in the OpenSSL "Salted__" passphrase format.

This is what CryptoJS ``AES.encrypt(text, passphrase)`` produces: base64 of
``b"Salted__" + salt[8] + ciphertext``, AES-256-CBC, key and IV derived with
EVP_BytesToKey (one MD5 round), PKCS7 padding.
"""

from __future__ import annotations

import base64
import binascii
import hashlib

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

SALT_MAGIC = b"Salted__"
KEY_LEN = 32
IV_LEN = 16


def derive_key_iv(passphrase: bytes, salt: bytes) -> tuple[bytes, bytes]:
    derived = b""
    block = b""
    while len(derived) < KEY_LEN + IV_LEN:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:KEY_LEN], derived[KEY_LEN : KEY_LEN + IV_LEN]


def encrypt_code(plaintext: str, passphrase: str, salt: bytes) -> str:
    """Inverse of :func:`decrypt_code`, with an explicit 8-byte salt."""
    if len(salt) != 8:
        raise ValueError("salt must be 8 bytes")
    key, iv = derive_key_iv(passphrase.encode("utf-8"), salt)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    data = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(data) + encryptor.finalize()
    return base64.b64encode(SALT_MAGIC + salt + ciphertext).decode("ascii")


def decrypt_code(ciphertext: str, passphrase: str) -> str | None:
    """Return the plaintext code, or None if it cannot be decrypted."""
    try:
        raw = base64.b64decode(ciphertext, validate=True)
    except (binascii.Error, ValueError):
        return None
    if not raw.startswith(SALT_MAGIC) or len(raw) < 16 + IV_LEN or (len(raw) - 16) % IV_LEN:
        return None

    salt, body = raw[8:16], raw[16:]
    key, iv = derive_key_iv(passphrase.encode("utf-8"), salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        data = decryptor.update(body) + decryptor.finalize()
        plain = unpadder.update(data) + unpadder.finalize()
        return plain.decode("utf-8") or None
    except (ValueError, UnicodeDecodeError):
        return None
