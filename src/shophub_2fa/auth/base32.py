"""RFC 4648 Base32 codec for TOTP secrets.

Secrets are stored and shown to users as uppercase, ``=``-padded Base32.
Decoding is case-insensitive and tolerates a missing final padding, but
rejects any character outside the alphabet instead of silently mapping it
to zero bits.
"""

from __future__ import annotations

from shophub_2fa.errors import DecodeError, InvalidCharacterError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
PAD = "="

_LOOKUP: dict[str, int] = {ch: i for i, ch in enumerate(ALPHABET)}

# Data characters emitted for a final chunk of 1..5 bytes.
_DATA_CHARS = {1: 2, 2: 4, 3: 5, 4: 7, 5: 8}

# Number of leading data characters in a block -> bytes it carries.
_BYTES_FOR_CHARS = {2: 1, 4: 2, 5: 3, 7: 4, 8: 5}


def encode(data: bytes) -> str:
    """Encode bytes as padded uppercase Base32. Empty input gives ``""``."""
    out: list[str] = []
    for start in range(0, len(data), 5):
        chunk = data[start : start + 5]
        real = len(chunk)
        buf = int.from_bytes(chunk.ljust(5, b"\x00"), "big")
        chars = [ALPHABET[(buf >> (35 - 5 * i)) & 0x1F] for i in range(8)]
        keep = _DATA_CHARS[real]
        out.append("".join(chars[:keep]) + PAD * (8 - keep))
    return "".join(out)


def decode(text: str) -> bytes:
    """Decode Base32 text, raising ``DecodeError`` on malformed input."""
    text = text.strip().upper()
    out = bytearray()
    for start in range(0, len(text), 8):
        block = text[start : start + 8].ljust(8, PAD)
        values: list[int] = []
        data_chars = 0
        padded = False
        for offset, ch in enumerate(block):
            if ch == PAD:
                padded = True
                values.append(0)
                continue
            value = _LOOKUP.get(ch)
            if value is None:
                raise InvalidCharacterError(ch, start + offset)
            if padded:
                raise DecodeError(f"Data character after padding at position {start + offset}")
            values.append(value)
            data_chars += 1

        n_bytes = _BYTES_FOR_CHARS.get(data_chars)
        if n_bytes is None:
            raise DecodeError(f"Invalid Base32 block length at position {start}")

        buf = 0
        for value in values:
            buf = (buf << 5) | value
        out += buf.to_bytes(5, "big")[:n_bytes]
        if padded and start + 8 < len(text):
            raise DecodeError(f"Padding before end of input at position {start}")
    return bytes(out)
