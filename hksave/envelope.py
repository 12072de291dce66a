"""
Binary envelope codec for Hollow Knight / Silksong save files.

A save file is a .NET BinaryFormatter string record wrapping an encrypted
JSON document:

    [0:22]      fixed header
    [22:22+N]   LEB128 varint, length of the base64 text
    [..:-1]     base64(AES-256-ECB(PKCS7(json)))
    [-1]        terminator 0x0B

Both directions are deterministic: ECB uses no IV, so encoding the same
document always yields the same bytes.
"""

from __future__ import annotations

import base64
import binascii

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

HEADER = bytes(
    [
        0x00, 0x01, 0x00, 0x00, 0x00, 0xFF, 0xFF, 0xFF, 0xFF, 0x01, 0x00,
        0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x06, 0x01, 0x00, 0x00, 0x00,
    ]
)  # fmt: skip
TERMINATOR = 0x0B
KEY = b"UKu52ePUBwetZ9wNX88o54dnfKRu0T1l"
BLOCK_SIZE = 16


class EnvelopeError(ValueError):
    """Base class for save envelope failures."""


class MalformedEnvelope(EnvelopeError):
    """Buffer too short to hold the header and terminator."""


class MalformedLength(EnvelopeError):
    """Truncated varint, or declared length past the end of the buffer."""


class InvalidEncoding(EnvelopeError):
    """Payload is not valid base64."""


class DecryptionError(EnvelopeError):
    """Ciphertext is not block aligned or carries invalid padding."""


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as unsigned LEB128."""
    if value < 0:
        raise ValueError(f"varint must be non-negative, got {value}")

    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes) -> tuple[int, int]:
    """
    Read an unsigned LEB128 varint from the start of `data`.

    Returns:
        Tuple of (value, bytes consumed)

    Raises:
        MalformedLength: if the data ends before the final varint byte
    """
    result = 0
    shift = 0
    for consumed, byte in enumerate(data, start=1):
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, consumed
        shift += 7

    raise MalformedLength(f"truncated length prefix ({len(data)} bytes, continuation bit still set)")


def _cipher() -> Cipher:
    return Cipher(algorithms.AES(KEY), modes.ECB())


def encrypt(plaintext: bytes) -> bytes:
    """AES-256-ECB encrypt with PKCS#7 padding."""
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()

    encryptor = _cipher().encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt(ciphertext: bytes) -> bytes:
    """AES-256-ECB decrypt and strip PKCS#7 padding."""
    if len(ciphertext) % BLOCK_SIZE:
        raise DecryptionError(
            f"ciphertext length {len(ciphertext)} is not a multiple of {BLOCK_SIZE}"
        )

    decryptor = _cipher().decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise DecryptionError(f"invalid padding: {e}") from e


def decode(raw: bytes) -> bytes:
    """
    Decode a raw save envelope into its plaintext document bytes.

    The plaintext is expected to be JSON but is not parsed here.

    Raises:
        MalformedEnvelope: buffer shorter than header + terminator
        MalformedLength: bad varint or declared length past the buffer
        InvalidEncoding: payload is not base64
        DecryptionError: bad block alignment or padding
    """
    if len(raw) < len(HEADER) + 1:
        raise MalformedEnvelope(
            f"envelope is {len(raw)} bytes, need at least {len(HEADER) + 1}"
        )

    body = raw[len(HEADER) : -1]
    length, offset = decode_varint(body)
    if length > len(body) - offset:
        raise MalformedLength(
            f"declared payload length {length} exceeds remaining {len(body) - offset} bytes"
        )

    payload = body[offset : offset + length]
    try:
        ciphertext = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise InvalidEncoding(f"payload is not valid base64: {e}") from e

    return decrypt(ciphertext)


def encode(document: bytes) -> bytes:
    """Encode plaintext document bytes into a raw save envelope."""
    text = base64.b64encode(encrypt(document))
    return HEADER + encode_varint(len(text)) + text + bytes([TERMINATOR])
