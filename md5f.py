#!/usr/bin/env python3
"""
Dyson Sphere Program - MD5F Hash
================================

Blueprint strings are signed with a perturbed MD5 ("MD5F"). The block
structure, padding and digest byte order are those of RFC 1321 MD5; the
differences are the initial state and a handful of additive constants in
the round table.

Initial state:

| Variant  | A        | B        | C        | D        |
|----------|----------|----------|----------|----------|
| ORIGINAL | 67452301 | efcdab89 | 98badcfe | 10325476 |
| MD5F     | 67452301 | efdcab89 | 98badcfe | 10325746 |
| MD5FC    | 67452301 | efdcab89 | 98badcfe | 10325746 |

Patched steps (0-based; roles, message word and shift are unchanged):

| Step | ORIGINAL   | MD5F       | MD5FC      |
|------|------------|------------|------------|
| 1    | 0xe8c7b756 | 0xe8d7b756 | 0xe8d7b756 |
| 3    | 0xc1bdceee |            | 0xc1bdceef |
| 6    | 0xa8304613 | 0xa8304623 | 0xa8304623 |
| 12   | 0x6b901122 | 0x6b9f1122 | 0x6b9f1122 |
| 15   | 0x49b40821 | 0x39b40821 | 0x39b40821 |
| 19   | 0xe9b6c7aa | 0xc9b6c7aa | 0xc9b6c7aa |
| 21   | 0x02441453 | 0x02443453 | 0x02443453 |
| 24   | 0x21e1cde6 | 0x21f1cde6 | 0x23f1cde6 |
| 27   | 0x455a14ed | 0x475a14ed | 0x475a14ed |
| 34   | 0x6d9d6122 |            | 0x6d9d6121 |

ORIGINAL is plain MD5 and must agree with hashlib.md5.

Usage:
------
    python md5f.py                  # run reference vector self-check
    python md5f.py "some text"      # print MD5F hex digest of each argument
"""

import sys
import argparse
from collections import namedtuple
from enum import Enum
from typing import Union

from bp_errors import HashFinalizedError, HashNotFinalizedError

MASK32 = 0xFFFFFFFF
BLOCK_SIZE = 64


class Variant(Enum):
    ORIGINAL = "original"
    MD5F = "md5f"
    MD5FC = "md5fc"


# =============================================================================
# Mixing Functions
# =============================================================================

def _f(x: int, y: int, z: int) -> int:
    return ((x & y) | (~x & z)) & MASK32


def _g(x: int, y: int, z: int) -> int:
    return ((x & z) | (y & ~z)) & MASK32


def _h(x: int, y: int, z: int) -> int:
    return x ^ y ^ z


def _i(x: int, y: int, z: int) -> int:
    return (y ^ (x | (~z & MASK32))) & MASK32


def _rotl(x: int, s: int) -> int:
    return ((x << s) | (x >> (32 - s))) & MASK32


# =============================================================================
# Round Tables
# =============================================================================

# a, b, c, d: state register roles; k: message word; s: rotation; t: constant
RoundOp = namedtuple('RoundOp', ['a', 'b', 'c', 'd', 'k', 's', 't', 'func'])

_ROLES = [(0, 1, 2, 3), (3, 0, 1, 2), (2, 3, 0, 1), (1, 2, 3, 0)]

_SHIFTS = [
    (7, 12, 17, 22),
    (5, 9, 14, 20),
    (4, 11, 16, 23),
    (6, 10, 15, 21),
]

_FUNCS = [_f, _g, _h, _i]

_T = [
    0xd76aa478, 0xe8c7b756, 0x242070db, 0xc1bdceee,
    0xf57c0faf, 0x4787c62a, 0xa8304613, 0xfd469501,
    0x698098d8, 0x8b44f7af, 0xffff5bb1, 0x895cd7be,
    0x6b901122, 0xfd987193, 0xa679438e, 0x49b40821,
    0xf61e2562, 0xc040b340, 0x265e5a51, 0xe9b6c7aa,
    0xd62f105d, 0x02441453, 0xd8a1e681, 0xe7d3fbc8,
    0x21e1cde6, 0xc33707d6, 0xf4d50d87, 0x455a14ed,
    0xa9e3e905, 0xfcefa3f8, 0x676f02d9, 0x8d2a4c8a,
    0xfffa3942, 0x8771f681, 0x6d9d6122, 0xfde5380c,
    0xa4beea44, 0x4bdecfa9, 0xf6bb4b60, 0xbebfbc70,
    0x289b7ec6, 0xeaa127fa, 0xd4ef3085, 0x04881d05,
    0xd9d4d039, 0xe6db99e5, 0x1fa27cf8, 0xc4ac5665,
    0xf4292244, 0x432aff97, 0xab9423a7, 0xfc93a039,
    0x655b59c3, 0x8f0ccc92, 0xffeff47d, 0x85845dd1,
    0x6fa87e4f, 0xfe2ce6e0, 0xa3014314, 0x4e0811a1,
    0xf7537e82, 0xbd3af235, 0x2ad7d2bb, 0xeb86d391,
]


def _message_index(round_no: int, i: int) -> int:
    if round_no == 0:
        return i
    if round_no == 1:
        return (1 + 5 * i) % 16
    if round_no == 2:
        return (5 + 3 * i) % 16
    return (7 * i) % 16


def _build_base_ops():
    ops = []
    for step in range(64):
        round_no, i = divmod(step, 16)
        a, b, c, d = _ROLES[step % 4]
        ops.append(RoundOp(a, b, c, d, _message_index(round_no, i),
                           _SHIFTS[round_no][step % 4], _T[step], _FUNCS[round_no]))
    return ops


BASE_ROUND_OPS = _build_base_ops()

_MD5F_CONSTANTS = {
    1: 0xe8d7b756,
    6: 0xa8304623,
    12: 0x6b9f1122,
    15: 0x39b40821,
    19: 0xc9b6c7aa,
    21: 0x02443453,
    24: 0x21f1cde6,
    27: 0x475a14ed,
}

_MD5FC_CONSTANTS = dict(_MD5F_CONSTANTS)
_MD5FC_CONSTANTS.update({
    3: 0xc1bdceef,
    24: 0x23f1cde6,
    34: 0x6d9d6121,
})

VARIANT_PATCHES = {
    Variant.ORIGINAL: {},
    Variant.MD5F: {step: BASE_ROUND_OPS[step]._replace(t=t)
                   for step, t in _MD5F_CONSTANTS.items()},
    Variant.MD5FC: {step: BASE_ROUND_OPS[step]._replace(t=t)
                    for step, t in _MD5FC_CONSTANTS.items()},
}

ROUND_OPS = {
    variant: [patches.get(step, op) for step, op in enumerate(BASE_ROUND_OPS)]
    for variant, patches in VARIANT_PATCHES.items()
}

INITIAL_STATE = {
    Variant.ORIGINAL: (0x67452301, 0xefcdab89, 0x98badcfe, 0x10325476),
    Variant.MD5F: (0x67452301, 0xefdcab89, 0x98badcfe, 0x10325746),
    Variant.MD5FC: (0x67452301, 0xefdcab89, 0x98badcfe, 0x10325746),
}


# =============================================================================
# Hash Object
# =============================================================================

class DysonSphereMD5:
    """
    Streaming hash object, hashlib-like except that finalize() must be
    called before digest() / hexdigest().

        h = DysonSphereMD5(Variant.MD5F)
        h.update(b"abc").update(b"d").finalize()
        h.hexdigest()
    """

    def __init__(self, variant: Variant = Variant.MD5F):
        self.variant = variant
        self._ops = ROUND_OPS[variant]
        self._state = list(INITIAL_STATE[variant])
        self._buffer = bytearray()
        self._length = 0
        self._digest = None

    def update(self, data: Union[bytes, bytearray, str]) -> 'DysonSphereMD5':
        if self._digest is not None:
            raise HashFinalizedError()
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._length += len(data)
        self._buffer.extend(data)
        while len(self._buffer) >= BLOCK_SIZE:
            self._process_block(self._buffer[:BLOCK_SIZE])
            del self._buffer[:BLOCK_SIZE]
        return self

    def _process_block(self, block: bytes):
        x = [int.from_bytes(block[i:i + 4], 'little') for i in range(0, BLOCK_SIZE, 4)]
        local = list(self._state)
        for op in self._ops:
            total = (local[op.a] + op.func(local[op.b], local[op.c], local[op.d])
                     + x[op.k] + op.t) & MASK32
            local[op.a] = (local[op.b] + _rotl(total, op.s)) & MASK32
        for i in range(4):
            self._state[i] = (self._state[i] + local[i]) & MASK32

    def finalize(self) -> 'DysonSphereMD5':
        """Pad and process the remaining input. Calling it twice is a no-op."""
        if self._digest is not None:
            return self

        bit_length = (self._length * 8) & 0xFFFFFFFFFFFFFFFF
        remainder = len(self._buffer)
        pad_len = 56 - remainder if remainder < 56 else 120 - remainder

        tail = bytes(self._buffer) + b'\x80' + b'\x00' * (pad_len - 1) \
            + bit_length.to_bytes(8, 'little')
        for i in range(0, len(tail), BLOCK_SIZE):
            self._process_block(tail[i:i + BLOCK_SIZE])
        self._buffer.clear()

        self._digest = b''.join(word.to_bytes(4, 'little') for word in self._state)
        return self

    def is_finalized(self) -> bool:
        return self._digest is not None

    def digest(self) -> bytes:
        if self._digest is None:
            raise HashNotFinalizedError()
        return self._digest

    def hexdigest(self) -> str:
        return self.digest().hex()

    def copy(self) -> 'DysonSphereMD5':
        other = DysonSphereMD5(self.variant)
        other._state = list(self._state)
        other._buffer = bytearray(self._buffer)
        other._length = self._length
        other._digest = self._digest
        return other


def md5f_hexdigest(data: Union[bytes, str], variant: Variant = Variant.MD5F) -> str:
    """One-shot lowercase hex digest."""
    return DysonSphereMD5(variant).update(data).finalize().hexdigest()


# =============================================================================
# Self-check
# =============================================================================

REFERENCE_VECTORS = [
    (Variant.MD5F, b"", "84d1ce3bd68f49ab26eb0f96416617cf"),
    (Variant.MD5F, b"a", "f10bddaecb62e5a92433757867ee06db"),
    (Variant.MD5F, b"abcd", "fa27c78b6ec31559f0e760ce3f2b03f6"),
    (Variant.MD5F, b"Some random words blablablablablabla", "ffe3de11cdddb9ccecfef7089b420218"),
    (Variant.ORIGINAL, b"", "d41d8cd98f00b204e9800998ecf8427e"),
    (Variant.ORIGINAL, b"abc", "900150983cd24fb0d6963f7d28e17f72"),
]


def run_tests() -> bool:
    """Check the implementation against known digests"""
    print("=" * 70)
    print("MD5F Reference Vectors")
    print("=" * 70)

    failures = 0
    for variant, data, expected in REFERENCE_VECTORS:
        result = md5f_hexdigest(data, variant)
        status = "PASS" if result == expected else "FAIL"
        if result != expected:
            failures += 1
        print(f"{status}: {variant.name:<8} {data!r}")
        if result != expected:
            print(f"  Expected: {expected}")
            print(f"  Got:      {result}")

    print("=" * 70)
    if failures:
        print(f"RESULT: {failures} of {len(REFERENCE_VECTORS)} vectors failed")
    else:
        print(f"RESULT: all {len(REFERENCE_VECTORS)} vectors match")
    print("=" * 70)
    return failures == 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='Compute Dyson Sphere Program MD5F digests')
    parser.add_argument('text', nargs='+', help='Strings to hash')
    parser.add_argument('--variant', choices=[v.value for v in Variant], default='md5f',
                        help='Hash variant (default: md5f)')
    args = parser.parse_args(argv)

    variant = Variant(args.variant)
    for text in args.text:
        print(f"{md5f_hexdigest(text, variant)}  {text}")
    return 0


if __name__ == "__main__":
    # If no arguments provided, run tests
    if len(sys.argv) == 1:
        success = run_tests()
        sys.exit(0 if success else 1)
    else:
        sys.exit(main())
