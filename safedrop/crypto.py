"""AES-256-CBC encryption with PKCS#7 padding and secure random bytes."""

from __future__ import annotations

import secrets

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

KEY_SIZE = 32
IV_SIZE = 16
_BLOCK_BITS = 128

__all__ = [
    "KEY_SIZE",
    "IV_SIZE",
    "CryptoError",
    "generate_random_bytes",
    "encrypt",
    "decrypt",
]


class CryptoError(Exception):
    """Raised when a cryptographic operation fails."""


def generate_random_bytes(size: int) -> bytes:
    """Return ``size`` cryptographically secure random bytes."""
    if size < 0:
        raise CryptoError("Error generating random bytes")
    return secrets.token_bytes(size)


def _cipher(key: bytes, iv: bytes, action: str) -> Cipher:
    if len(key) != KEY_SIZE or len(iv) != IV_SIZE:
        raise CryptoError(f"{action} Init failed")
    return Cipher(algorithms.AES(bytes(key)), modes.CBC(bytes(iv)))


def encrypt(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """Encrypt ``plaintext`` with AES-256-CBC, padding it to whole blocks."""
    encryptor = _cipher(key, iv, "Encryption").encryptor()
    padder = padding.PKCS7(_BLOCK_BITS).padder()
    padded = padder.update(bytes(plaintext)) + padder.finalize()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """Decrypt AES-256-CBC ``ciphertext`` and strip its padding."""
    decryptor = _cipher(key, iv, "Decryption").decryptor()
    data = bytes(ciphertext)
    if not data:
        raise CryptoError("Decryption Final failed (Wrong Key?)")
    try:
        padded = decryptor.update(data) + decryptor.finalize()
        unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise CryptoError("Decryption Final failed (Wrong Key?)") from exc