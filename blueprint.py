#!/usr/bin/env python3
"""
Dyson Sphere Program - Blueprint String
=======================================

Text envelope shared by the game's blueprint clipboard and .txt files:

    BLUEPRINT:0,<layout>,<icon0>,<icon1>,<icon2>,<icon3>,<icon4>,0,<ticks>,
    <game_version>,<short_desc>,<long_desc>"<base64 gzip data>"<HASH>

(one line, no whitespace). Splitting everything after "BLUEPRINT:" on ','
yields exactly 12 components; the last one splits on '"' into the long
description, the base64 payload and the hash.

| Component | Content                                              |
|-----------|------------------------------------------------------|
| 0, 7      | fixed "0"                                            |
| 1         | icon layout id (see IconLayout)                      |
| 2-6       | icon item ids                                        |
| 8         | creation time, C# DateTime ticks                     |
| 9         | game version, e.g. 0.10.28.21014                     |
| 10, 11    | short / long description, percent-encoded            |

HASH is the MD5F digest (32 hex digits) of everything before the last '"'.
The game writes it in upper case; comparison is case-insensitive.

Usage:
------
    bp = Blueprint.read_from_file("factory.txt")
    data = bp.decoded_data()
    bp.short_desc = "Renamed"
    bp.write_to_file("factory_renamed.txt")
"""

import base64
import binascii
import gzip
import json
import zlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple
from urllib.parse import quote, unquote

from bp_data import BlueprintData
from bp_errors import EnvelopeFormatError, HashMismatchError
from csharp_time import csharp_now, csharp_to_datetime, datetime_to_csharp
from dsp_entities import IconLayout
from md5f import DysonSphereMD5, Variant

HEADER_PREFIX = "BLUEPRINT:"
COMPONENT_COUNT = 12
ICON_COUNT = 5


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise EnvelopeFormatError(f"Invalid {name} in blueprint string: {value!r}") from None


def _percent_decode(value: str, name: str) -> str:
    try:
        return unquote(value, errors='strict')
    except UnicodeDecodeError as e:
        raise EnvelopeFormatError(f"Invalid percent-encoding in {name}: {e}") from None


def _percent_encode(value: str) -> str:
    # Only RFC 3986 unreserved characters stay bare
    return quote(value, safe='')


def compute_hash(hashed_text: str) -> str:
    """Uppercase MD5F digest as written by the game."""
    return DysonSphereMD5(Variant.MD5F).update(hashed_text).finalize().hexdigest().upper()


def verify_hash(text: str) -> Tuple[str, str]:
    """
    Check the trailing hash of a blueprint string.

    Returns:
        (expected, calculated) lowercase hex digests

    Raises:
        EnvelopeFormatError: if there is no '"' separator
        HashMismatchError: if the digests differ
    """
    index = text.rfind('"')
    if index < 0:
        raise EnvelopeFormatError("No double quote found for hash separation")
    expected = text[index + 1:].strip().lower()
    calculated = compute_hash(text[:index]).lower()
    if expected != calculated:
        raise HashMismatchError(expected, calculated)
    return expected, calculated


@dataclass
class Blueprint:
    game_version: str
    data: bytes
    layout: int = int(IconLayout.ONE_ICON)
    icon0: int = 0
    icon1: int = 0
    icon2: int = 0
    icon3: int = 0
    icon4: int = 0
    timestamp: Optional[datetime] = None
    short_desc: str = ""
    long_desc: str = ""
    hash_value: str = field(default="", compare=False)

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = csharp_to_datetime(csharp_now())

    @property
    def icons(self) -> Tuple[int, ...]:
        return (self.icon0, self.icon1, self.icon2, self.icon3, self.icon4)

    def layout_kind(self) -> Optional[IconLayout]:
        try:
            return IconLayout(self.layout)
        except ValueError:
            return None

    # =========================================================================
    # Parsing
    # =========================================================================

    @classmethod
    def from_blueprint_string(cls, text: str, validate_hash: bool = True) -> 'Blueprint':
        """
        Parse a blueprint string.

        Raises:
            HashMismatchError: if validate_hash is set and the hash is wrong
            EnvelopeFormatError: for any structural problem in the envelope
        """
        if validate_hash:
            verify_hash(text)

        if not text.startswith(HEADER_PREFIX):
            raise EnvelopeFormatError(f"Blueprint string does not start with '{HEADER_PREFIX}'")

        components = text[len(HEADER_PREFIX):].split(',')
        if len(components) != COMPONENT_COUNT:
            raise EnvelopeFormatError(
                f"Invalid number of components in blueprint string: "
                f"{len(components)} (expected {COMPONENT_COUNT})")

        fixed0 = _parse_int(components[0], "fixed field")
        layout = _parse_int(components[1], "layout")
        icons = [_parse_int(components[2 + i], f"icon{i}") for i in range(ICON_COUNT)]
        fixed1 = _parse_int(components[7], "fixed field")
        ticks = _parse_int(components[8], "timestamp")
        if fixed0 != 0 or fixed1 != 0:
            raise EnvelopeFormatError("Fixed components are not zero")
        try:
            timestamp = csharp_to_datetime(ticks)
        except OverflowError:
            raise EnvelopeFormatError(f"Timestamp out of range: {ticks}") from None

        game_version = components[9]
        short_desc = _percent_decode(components[10], "short description")

        parts = components[11].split('"')
        if len(parts) != 3:
            raise EnvelopeFormatError(
                f"Invalid data section: expected long description, data and hash "
                f"separated by '\"', got {len(parts)} parts")
        long_desc_enc, b64_data, hash_value = parts
        long_desc = _percent_decode(long_desc_enc, "long description")

        try:
            compressed = base64.b64decode(b64_data, validate=True)
            data = gzip.decompress(compressed)
        except binascii.Error as e:
            raise EnvelopeFormatError(f"Invalid base64 data: {e}") from None
        except (OSError, EOFError, zlib.error) as e:
            raise EnvelopeFormatError(f"Invalid gzip data: {e}") from None

        return cls(
            game_version=game_version,
            data=data,
            layout=layout,
            icon0=icons[0],
            icon1=icons[1],
            icon2=icons[2],
            icon3=icons[3],
            icon4=icons[4],
            timestamp=timestamp,
            short_desc=short_desc,
            long_desc=long_desc,
            hash_value=hash_value.strip(),
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def serialize(self) -> str:
        """Build the blueprint string, recomputing the hash."""
        compressed = gzip.compress(self.data, mtime=0)
        b64_data = base64.b64encode(compressed).decode('ascii')

        components = ["0", str(int(self.layout))]
        components += [str(icon) for icon in self.icons]
        components += [
            "0",
            str(datetime_to_csharp(self.timestamp)),
            self.game_version,
            _percent_encode(self.short_desc),
            _percent_encode(self.long_desc),
        ]
        hashed_text = f'{HEADER_PREFIX}{",".join(components)}"{b64_data}'
        return f'{hashed_text}"{compute_hash(hashed_text)}'

    def decoded_data(self) -> BlueprintData:
        return BlueprintData.deserialize(self.data)

    def to_dict(self) -> dict:
        return {
            'icon': {
                'layout': int(self.layout),
                'images': list(self.icons),
            },
            'timestamp': self.timestamp.isoformat(sep=' '),
            'game_version': self.game_version,
            'short_desc': self.short_desc,
            'long_desc': self.long_desc,
            'data': self.decoded_data().to_dict(),
        }

    @classmethod
    def from_dict(cls, values: dict) -> 'Blueprint':
        """Inverse of to_dict(); the binary data is re-encoded from the tree."""
        icon = values.get('icon', {})
        images = list(icon.get('images', [])) + [0] * ICON_COUNT
        timestamp = values.get('timestamp')
        return cls(
            game_version=values['game_version'],
            data=BlueprintData.from_dict(values['data']).serialize(),
            layout=int(icon.get("layout", IconLayout.ONE_ICON)),
            icon0=images[0],
            icon1=images[1],
            icon2=images[2],
            icon3=images[3],
            icon4=images[4],
            timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
            short_desc=values.get('short_desc', ""),
            long_desc=values.get('long_desc', ""),
        )

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    # =========================================================================
    # File I/O
    # =========================================================================

    @classmethod
    def read_from_file(cls, path: str, validate_hash: bool = True) -> 'Blueprint':
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read().strip()
        return cls.from_blueprint_string(text, validate_hash)

    def write_to_file(self, path: str):
        self.write_text(self.serialize(), path)

    @staticmethod
    def write_text(text: str, path: str):
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)

    def __str__(self):
        return (f"Blueprint(version={self.game_version}, layout={self.layout}, "
                f"icons={list(self.icons)}, short_desc={self.short_desc!r}, "
                f"{len(self.data)} bytes)")
