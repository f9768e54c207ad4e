#!/usr/bin/env python3
"""
Blueprint Area Record
=====================

One placement region of a blueprint. Fixed 14-byte record:

| Offset | Size | Type | Field                 |
|--------|------|------|-----------------------|
| 0x00   | 1    | i8   | index                 |
| 0x01   | 1    | i8   | parent_index          |
| 0x02   | 2    | i16  | tropic_anchor         |
| 0x04   | 2    | i16  | area_segments         |
| 0x06   | 2    | i16  | anchor_local_offset_x |
| 0x08   | 2    | i16  | anchor_local_offset_y |
| 0x0A   | 2    | i16  | width                 |
| 0x0C   | 2    | i16  | height                |
"""

from dataclasses import dataclass, asdict
from typing import Tuple

from bp_utils import ensure_available, read_i8, read_i16, write_i8, write_i16


@dataclass(frozen=True)
class BlueprintArea:
    index: int
    parent_index: int
    tropic_anchor: int
    area_segments: int
    anchor_local_offset_x: int
    anchor_local_offset_y: int
    width: int
    height: int

    SIZE = 14

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple['BlueprintArea', int]:
        """
        Parse an area record at offset.

        Returns:
            (BlueprintArea, offset after the record)

        Raises:
            InsufficientDataError: if fewer than 14 bytes remain
        """
        ensure_available(data, offset, cls.SIZE, "area record")
        index, offset = read_i8(data, offset)
        parent_index, offset = read_i8(data, offset)
        tropic_anchor, offset = read_i16(data, offset)
        area_segments, offset = read_i16(data, offset)
        anchor_local_offset_x, offset = read_i16(data, offset)
        anchor_local_offset_y, offset = read_i16(data, offset)
        width, offset = read_i16(data, offset)
        height, offset = read_i16(data, offset)
        return cls(
            index=index,
            parent_index=parent_index,
            tropic_anchor=tropic_anchor,
            area_segments=area_segments,
            anchor_local_offset_x=anchor_local_offset_x,
            anchor_local_offset_y=anchor_local_offset_y,
            width=width,
            height=height,
        ), offset

    def serialize(self) -> bytes:
        out = bytearray()
        write_i8(out, self.index)
        write_i8(out, self.parent_index)
        write_i16(out, self.tropic_anchor)
        write_i16(out, self.area_segments)
        write_i16(out, self.anchor_local_offset_x)
        write_i16(out, self.anchor_local_offset_y)
        write_i16(out, self.width)
        write_i16(out, self.height)
        return bytes(out)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: dict) -> 'BlueprintArea':
        return cls(**values)

    def __str__(self):
        return (f"Area(index={self.index}, parent={self.parent_index}, "
                f"segments={self.area_segments}, size={self.width}x{self.height})")
