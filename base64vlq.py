"""Decode and encode Base64 VLQ encoded sequences

Base64 VLQ is used in source maps.

VLQ values consist of 6 bits (matching the 64 characters of the Base64
alphabet), with the most significant bit a *continuation* flag. If the
flag is set, then the next character in the input is part of the same
integer value. Multiple VLQ character sequences so form an integer
value, in little-endian order.

The *first* VLQ value consists of a continuation flag, 4 bits for the
value, and the last bit the *sign* of the integer:

  +-----+-----+-----+-----+-----+-----+
  |  c  |  b3 |  b2 |  b1 |  b0 |  s  |
  +-----+-----+-----+-----+-----+-----+

while subsequent VLQ characters contain 5 bits of value:

  +-----+-----+-----+-----+-----+-----+
  |  c  |  b4 |  b3 |  b2 |  b1 |  b0 |
  +-----+-----+-----+-----+-----+-----+

Values are limited to signed 64-bit integers. Because the sign is kept
apart from the magnitude, the smallest value, -2**63, has no positive
counterpart; it is written as a "negative zero" (the single character
``B``).

`decode` pulls bytes one at a time from any iterable and stops right after
the last digit of a value, so several values can be read from one iterator.
`encode` writes each digit to any object with a ``write`` method.

For source maps, Base64 VLQ sequences can contain 1, 4 or 5 elements.

"""

from io import BytesIO
from itertools import chain
from typing import BinaryIO, Iterable, Optional, Tuple

_b64chars = b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_b64table = [None] * (max(_b64chars) + 1)
for i, b in enumerate(_b64chars):
    _b64table[b] = i

_shiftsize, _flag, _mask = 5, 1 << 5, (1 << 5) - 1

# the last shift at which a 5 bit group still fits into 64 bits, and the
# payload bit that would spill over at that shift
_maxshift, _spill = 60, 1 << 4

_u64 = (1 << 64) - 1
_i64min, _i64max = -(1 << 63), (1 << 63) - 1


class VLQError(ValueError):
    """Base class for Base64 VLQ errors"""


class InvalidBase64Error(VLQError):
    """The input contained a byte outside the Base64 alphabet"""

    def __init__(self, byte: int):
        super().__init__(f"Invalid Base64 character {_describe(byte)}")
        self.byte = byte


class UnexpectedEOFError(VLQError, EOFError):
    """The input ended before the last digit of a value"""

    def __init__(self, msg: str = "Unexpected end of input in VLQ value"):
        super().__init__(msg)


class VLQOverflowError(VLQError, OverflowError):
    """The value does not fit in a signed 64-bit integer"""


def _describe(byte: int) -> str:
    if 0x20 < byte < 0x7F:
        return f"{chr(byte)!r}"
    return f"0x{byte:02x}"


def decode_digit(byte: int) -> int:
    """Map one alphabet byte to its 6-bit digit"""
    digit: Optional[int] = None
    if 0 <= byte < len(_b64table):
        digit = _b64table[byte]
    if digit is None:
        raise InvalidBase64Error(byte)
    return digit


def encode_digit(digit: int) -> int:
    """Map a 6-bit digit to its alphabet byte"""
    assert 0 <= digit < 64, f"digit out of range: {digit}"
    return _b64chars[digit]


def decode(source: Iterable[int], strict: bool = True) -> int:
    """Decode a single Base64 VLQ value from `source`

    `source` yields byte values. Exactly the bytes of one value are taken
    from it, so passing an iterator leaves it positioned at the next value.

    With `strict` (the default) values that do not fit a signed 64-bit
    integer raise `VLQOverflowError`. Without it the value silently wraps
    at 64 bits, and a "negative zero" decodes to 0 rather than -2**63.

    """
    source = iter(source)
    shiftsize, flag, mask = _shiftsize, _flag, _mask
    shift = value = 0
    while True:
        byte = next(source, None)
        if byte is None:
            raise UnexpectedEOFError()
        digit = decode_digit(byte)
        if strict and (
            shift > _maxshift or (shift == _maxshift and digit & _spill)
        ):
            raise VLQOverflowError("Base64 VLQ value does not fit in 64 bits")
        value = (value | (digit & mask) << shift) & _u64
        shift += shiftsize
        if not digit & flag:
            break

    # the low bit holds the sign
    negative, value = value & 1, value >> 1
    if not negative:
        return value
    if not value and strict:
        return _i64min
    return -value


def encode(value: int, sink: BinaryIO) -> None:
    """Encode `value` as Base64 VLQ, writing each digit to `sink`"""
    if not _i64min <= value <= _i64max:
        raise VLQOverflowError(f"{value} does not fit in a signed 64-bit integer")
    shiftsize, flag, mask = _shiftsize, _flag, _mask
    negative = value < 0
    # -2**63 has no positive counterpart; use its unsigned bit pattern
    value = value & _u64 if value == _i64min else abs(value)
    # add sign bit
    value = (value << 1) & _u64 | negative
    while True:
        digit, value = value & mask, value >> shiftsize
        if value:
            digit |= flag
        sink.write(bytes((encode_digit(digit),)))
        if not value:
            break


def encode_bytes(value: int) -> bytes:
    """Encode a single integer to its Base64 VLQ bytes"""
    buf = BytesIO()
    encode(value, buf)
    return buf.getvalue()


def base64vlq_decode(vlqval: str, strict: bool = True) -> Tuple[int, ...]:
    """Decode every Base64 VLQ value in a segment"""
    results = []
    add = results.append
    # non-ASCII text is reported by its first UTF-8 byte
    source = iter(vlqval.encode("utf-8"))
    for first in source:
        add(decode(chain((first,), source), strict))
    return tuple(results)


def base64vlq_encode(*values: int) -> str:
    """Encode integers to a VLQ value"""
    buf = BytesIO()
    for v in values:
        encode(v, buf)
    return buf.getvalue().decode("ascii")
