#!/usr/bin/env python3
"""
Blueprint Binary Data
=====================

The decompressed payload of a blueprint string:

| Section         | Size              | Contents                              |
|-----------------|-------------------|---------------------------------------|
| Header          | 29 bytes          | BlueprintDataHeader                   |
| Areas           | 14 * area_count   | BlueprintArea records                 |
| Building count  | 4 bytes           | i32                                   |
| Buildings       | variable          | BlueprintBuilding records             |

Header layout (all little-endian):

| Offset | Type | Field              |
|--------|------|--------------------|
| 0x00   | i32  | patch              |
| 0x04   | i32  | cursor_offset_x    |
| 0x08   | i32  | cursor_offset_y    |
| 0x0C   | i32  | cursor_target_area |
| 0x10   | i32  | dragbox_size_x     |
| 0x14   | i32  | dragbox_size_y     |
| 0x18   | i32  | primary_area_index |
| 0x1C   | i8   | area_count         |

Blueprints saved before patch 1 could carry a bad anchor offset on the
areas. When patch < 1 and the first or last area has area_segments == 4
and anchor_local_offset_x == 17, the anchor x offset of every area is reset
to 0 after parsing.

Usage:
------
    parser = BlueprintDataParser(verbose=True)
    data = parser.parse(raw_bytes)
"""

import json
from dataclasses import dataclass, asdict, replace
from typing import List, Tuple

from bp_area import BlueprintArea
from bp_building import BlueprintBuilding
from bp_errors import CorruptedDataError
from bp_utils import (ensure_available, hex_sample, read_i8, read_i32,
                      write_i8, write_i32)

MAX_AREA_COUNT = 64

# Pre-patch anchor offset repair trigger
REPAIR_AREA_SEGMENTS = 4
REPAIR_ANCHOR_OFFSET_X = 17


# =============================================================================
# Headers
# =============================================================================

@dataclass(frozen=True)
class BlueprintDataHeader:
    patch: int
    cursor_offset_x: int
    cursor_offset_y: int
    cursor_target_area: int
    dragbox_size_x: int
    dragbox_size_y: int
    primary_area_index: int
    area_count: int

    SIZE = 29

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple['BlueprintDataHeader', int]:
        """
        Parse and validate the header.

        Raises:
            InsufficientDataError: if fewer than 29 bytes remain
            CorruptedDataError: if area_count or primary_area_index is out of range
        """
        ensure_available(data, offset, cls.SIZE, "data header")
        values = []
        for _ in range(7):
            value, offset = read_i32(data, offset)
            values.append(value)
        area_count, offset = read_i8(data, offset)
        header = cls(*values, area_count)
        header.validate()
        return header, offset

    def validate(self):
        if not 0 <= self.area_count <= MAX_AREA_COUNT:
            raise CorruptedDataError(
                f"Area count {self.area_count} out of range 0..{MAX_AREA_COUNT}")
        if not -1 <= self.primary_area_index <= self.area_count:
            raise CorruptedDataError(
                f"Primary area index {self.primary_area_index} out of range "
                f"-1..{self.area_count}")

    def serialize(self) -> bytes:
        out = bytearray()
        for value in (self.patch, self.cursor_offset_x, self.cursor_offset_y,
                      self.cursor_target_area, self.dragbox_size_x,
                      self.dragbox_size_y, self.primary_area_index):
            write_i32(out, value)
        write_i8(out, self.area_count)
        return bytes(out)

    def __str__(self):
        return (f"Header(patch={self.patch}, cursor=({self.cursor_offset_x}, "
                f"{self.cursor_offset_y}), target_area={self.cursor_target_area}, "
                f"dragbox={self.dragbox_size_x}x{self.dragbox_size_y}, "
                f"primary_area={self.primary_area_index}, areas={self.area_count})")


@dataclass(frozen=True)
class BuildingHeader:
    count: int

    SIZE = 4

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple['BuildingHeader', int]:
        ensure_available(data, offset, cls.SIZE, "building count")
        count, offset = read_i32(data, offset)
        if count < 0:
            raise CorruptedDataError(f"Negative building count {count}")
        return cls(count), offset

    def serialize(self) -> bytes:
        out = bytearray()
        write_i32(out, self.count)
        return bytes(out)


# =============================================================================
# Blueprint Data
# =============================================================================

@dataclass(frozen=True)
class BlueprintData:
    header: BlueprintDataHeader
    areas: Tuple[BlueprintArea, ...]
    buildings: Tuple[BlueprintBuilding, ...]

    @classmethod
    def deserialize(cls, data: bytes) -> 'BlueprintData':
        return BlueprintDataParser().parse(data)

    def serialize(self) -> bytes:
        out = bytearray(self.header.serialize())
        for area in self.areas:
            out.extend(area.serialize())
        out.extend(BuildingHeader(len(self.buildings)).serialize())
        for building in self.buildings:
            out.extend(building.serialize())
        return bytes(out)

    def to_dict(self) -> dict:
        return {
            'header': asdict(self.header),
            'areas': [area.to_dict() for area in self.areas],
            'buildings': [building.to_dict() for building in self.buildings],
        }

    @classmethod
    def from_dict(cls, values: dict) -> 'BlueprintData':
        areas = tuple(BlueprintArea.from_dict(a) for a in values.get('areas', []))
        header_values = dict(values['header'])
        header_values['area_count'] = len(areas)
        header = BlueprintDataHeader(**header_values)
        header.validate()
        return cls(
            header=header,
            areas=areas,
            buildings=tuple(BlueprintBuilding.from_dict(b)
                            for b in values.get('buildings', [])),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def needs_anchor_repair(header: BlueprintDataHeader, areas) -> bool:
    if header.patch >= 1 or not areas:
        return False
    for area in (areas[0], areas[-1]):
        if (area.area_segments == REPAIR_AREA_SEGMENTS
                and area.anchor_local_offset_x == REPAIR_ANCHOR_OFFSET_X):
            return True
    return False


def repair_areas(header: BlueprintDataHeader, areas) -> Tuple[BlueprintArea, ...]:
    """Reset the anchor x offset of all areas for pre-patch blueprints."""
    if not needs_anchor_repair(header, areas):
        return tuple(areas)
    return tuple(replace(area, anchor_local_offset_x=0) for area in areas)


class BlueprintDataParser:
    """Decode the blueprint payload, optionally tracing each record."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def parse(self, data: bytes) -> BlueprintData:
        """
        Raises:
            InsufficientDataError, CorruptedDataError, UnknownCatalogValueError
        """
        if self.verbose:
            print(f"Blueprint data: {len(data)} bytes")
            for line in hex_sample(data):
                print(f"  {line}")

        header, offset = BlueprintDataHeader.deserialize(data, 0)
        if self.verbose:
            print(f"  0x0000: {header}")

        areas: List[BlueprintArea] = []
        for _ in range(header.area_count):
            start = offset
            area, offset = BlueprintArea.deserialize(data, offset)
            areas.append(area)
            if self.verbose:
                print(f"  0x{start:04X}: {area}")

        building_header, offset = BuildingHeader.deserialize(data, offset)
        if self.verbose:
            print(f"  0x{offset - BuildingHeader.SIZE:04X}: {building_header.count} buildings")

        buildings: List[BlueprintBuilding] = []
        for _ in range(building_header.count):
            start = offset
            building, offset = BlueprintBuilding.deserialize(data, offset)
            buildings.append(building)
            if self.verbose:
                print(f"  0x{start:04X}: {building}")

        if needs_anchor_repair(header, areas):
            if self.verbose:
                print("  Resetting anchor x offset on all areas (pre-patch blueprint)")
            areas = list(repair_areas(header, areas))

        if self.verbose and offset != len(data):
            print(f"  {len(data) - offset} trailing bytes ignored")

        return BlueprintData(header=header, areas=tuple(areas), buildings=tuple(buildings))
