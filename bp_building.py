#!/usr/bin/env python3
"""
Blueprint Building Record
=========================

Every building record starts with a signed 32-bit tag. The tag selects one
of four record layouts written by successive game versions:

| Tag range          | Layout            | Index field    | Item-dependent orientation | Content blob |
|--------------------|-------------------|----------------|----------------------------|--------------|
| tag <= -102        | CONTENT           | separate i32   | yes                        | yes          |
| -102 < tag <= -101 | ITEM_ORIENTED     | separate i32   | yes                        | no           |
| -101 < tag <= -100 | FIXED_ORIENTATION | separate i32   | no (fixed field order)     | no           |
| tag > -100         | LEGACY            | the tag itself | no                         | no           |

Item-dependent orientation (CONTENT / ITEM_ORIENTED)
---------------------------------------------------
    index:i32 item_id:i16 model_index:i16 area_index:i8
    x:f32 y:f32 z:f32 yaw:f32
    then, depending on the item kind:
      conveyor belt: tilt:f32 [x2 y2 z2 (CONTENT only, else copied from x y z)]
                     yaw2 = yaw, tilt2 = tilt, pitch = pitch2 = 0
      sorter:        tilt pitch x2 y2 z2 yaw2 tilt2 pitch2 (all f32)
      anything else: [x2 y2 z2 (CONTENT only, else copied)]
                     yaw2 = yaw, tilt = tilt2 = pitch = pitch2 = 0
    The item id must be in the catalog here, otherwise the record cannot be
    decoded.

FIXED_ORIENTATION
-----------------
    index:i32 area_index:i8 x y z x2 y2 z2 yaw yaw2 tilt:f32
    item_id:i16 model_index:i16                     (tilt2 = pitch = pitch2 = 0)

LEGACY
------
    area_index:i8 x y z x2 y2 z2 yaw yaw2:f32
    item_id:i16 model_index:i16                     (index = tag, no tilt/pitch)

Common suffix
-------------
    output_object_index:i32 input_object_index:i32
    output_to_slot input_from_slot output_from_slot input_to_slot:i8
    output_offset input_offset:i8 recipe_id:i16 filter_id:i16
    parameter_count:i16 parameters:i32[parameter_count]
    CONTENT only: content_length:i32 content:u8[content_length]

The content blob is kept verbatim; its structure is not decoded.
"""

import json
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional, Tuple, Union

from bp_errors import CorruptedDataError
from bp_station import (StationParameters, PLANETARY_STORAGE_LEN,
                        INTERSTELLAR_STORAGE_LEN, STATION_SLOTS_LEN)
from bp_utils import (ensure_available, read_i8, read_i16, read_i32, read_f32,
                      write_i8, write_i16, write_i32, write_f32)
from dsp_entities import DysonSphereItem, find_item, item_from_id


class BuildingLayout(Enum):
    CONTENT = "content"
    ITEM_ORIENTED = "item_oriented"
    FIXED_ORIENTATION = "fixed_orientation"
    LEGACY = "legacy"

    @classmethod
    def from_tag(cls, tag: int) -> 'BuildingLayout':
        if tag <= -102:
            return cls.CONTENT
        if tag <= -101:
            return cls.ITEM_ORIENTED
        if tag <= -100:
            return cls.FIXED_ORIENTATION
        return cls.LEGACY

    @property
    def item_dependent(self) -> bool:
        return self in (BuildingLayout.CONTENT, BuildingLayout.ITEM_ORIENTED)


# Fixed-size group sizes, used for bounds checks before each group is read
ITEM_ORIENTED_HEAD_SIZE = 4 + 2 + 2 + 1 + 4 * 4
FIXED_ORIENTATION_HEAD_SIZE = 4 + 1 + 9 * 4 + 2 + 2
LEGACY_HEAD_SIZE = 1 + 8 * 4 + 2 + 2
SUFFIX_SIZE = 4 + 4 + 6 * 1 + 2 + 2 + 2


@dataclass(frozen=True)
class RawParameters:
    """Parameter array of a building kind without a dedicated decoder"""
    values: Tuple[int, ...]


BuildingParameters = Union[StationParameters, RawParameters]


def _read_f32s(data: bytes, offset: int, count: int, what: str):
    ensure_available(data, offset, 4 * count, what)
    values = []
    for _ in range(count):
        value, offset = read_f32(data, offset)
        values.append(value)
    return values, offset


@dataclass(frozen=True)
class BlueprintBuilding:
    tag: int
    layout: BuildingLayout = field(init=False)
    index: int = 0
    area_index: int = 0
    local_offset_x: float = 0.0
    local_offset_y: float = 0.0
    local_offset_z: float = 0.0
    local_offset_x2: float = 0.0
    local_offset_y2: float = 0.0
    local_offset_z2: float = 0.0
    yaw: float = 0.0
    yaw2: float = 0.0
    tilt: float = 0.0
    tilt2: float = 0.0
    pitch: float = 0.0
    pitch2: float = 0.0
    item_id: int = 0
    model_index: int = 0
    output_object_index: int = -1
    input_object_index: int = -1
    output_to_slot: int = 0
    input_from_slot: int = 0
    output_from_slot: int = 0
    input_to_slot: int = 0
    output_offset: int = 0
    input_offset: int = 0
    recipe_id: int = 0
    filter_id: int = 0
    parameters: Tuple[int, ...] = ()
    content: bytes = b''

    def __post_init__(self):
        object.__setattr__(self, 'layout', BuildingLayout.from_tag(self.tag))
        if self.layout is BuildingLayout.LEGACY and self.index != self.tag:
            raise CorruptedDataError(
                f"Legacy building tag {self.tag} doesn't match its index {self.index}")
        object.__setattr__(self, 'parameters', tuple(self.parameters))
        object.__setattr__(self, 'content', bytes(self.content))

    # =========================================================================
    # Decoding
    # =========================================================================

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple['BlueprintBuilding', int]:
        """
        Parse one building record at offset.

        Returns:
            (BlueprintBuilding, offset after the record)

        Raises:
            InsufficientDataError: if the record runs past the end of data
            UnknownCatalogValueError: if an item-oriented record has an unknown item id
            CorruptedDataError: if the parameter count is negative
        """
        ensure_available(data, offset, 4, "building tag")
        tag, offset = read_i32(data, offset)
        layout = BuildingLayout.from_tag(tag)

        if layout.item_dependent:
            values, offset = cls._read_item_oriented(data, offset, layout)
        elif layout is BuildingLayout.FIXED_ORIENTATION:
            values, offset = cls._read_fixed_orientation(data, offset)
        else:
            values, offset = cls._read_legacy(data, offset, tag)

        offset = cls._read_suffix(data, offset, values)

        if layout is BuildingLayout.CONTENT:
            ensure_available(data, offset, 4, "building content length")
            content_len, offset = read_i32(data, offset)
            # Negative lengths skip nothing
            content_len = max(content_len, 0)
            ensure_available(data, offset, content_len, "building content")
            values['content'] = bytes(data[offset:offset + content_len])
            offset += content_len

        return cls(tag=tag, **values), offset

    @staticmethod
    def _read_item_oriented(data: bytes, offset: int, layout: BuildingLayout):
        ensure_available(data, offset, ITEM_ORIENTED_HEAD_SIZE, "building header")
        index, offset = read_i32(data, offset)
        item_id, offset = read_i16(data, offset)
        model_index, offset = read_i16(data, offset)
        area_index, offset = read_i8(data, offset)
        x, offset = read_f32(data, offset)
        y, offset = read_f32(data, offset)
        z, offset = read_f32(data, offset)
        yaw, offset = read_f32(data, offset)

        values = dict(index=index, item_id=item_id, model_index=model_index,
                      area_index=area_index, local_offset_x=x, local_offset_y=y,
                      local_offset_z=z, yaw=yaw, yaw2=yaw)
        has_secondary = layout is BuildingLayout.CONTENT

        item = item_from_id(item_id)
        if item.is_conveyor_belt():
            (tilt,), offset = _read_f32s(data, offset, 1, "belt tilt")
            values.update(tilt=tilt, tilt2=tilt)
        elif item.is_sorter():
            (tilt, pitch, x2, y2, z2, yaw2, tilt2, pitch2), offset = \
                _read_f32s(data, offset, 8, "sorter orientation")
            values.update(tilt=tilt, pitch=pitch, local_offset_x2=x2,
                          local_offset_y2=y2, local_offset_z2=z2, yaw2=yaw2,
                          tilt2=tilt2, pitch2=pitch2)
            return values, offset

        if has_secondary:
            (x2, y2, z2), offset = _read_f32s(data, offset, 3, "secondary offset")
        else:
            x2, y2, z2 = x, y, z
        values.update(local_offset_x2=x2, local_offset_y2=y2, local_offset_z2=z2)
        return values, offset

    @staticmethod
    def _read_fixed_orientation(data: bytes, offset: int):
        ensure_available(data, offset, FIXED_ORIENTATION_HEAD_SIZE, "building header")
        index, offset = read_i32(data, offset)
        area_index, offset = read_i8(data, offset)
        (x, y, z, x2, y2, z2, yaw, yaw2, tilt), offset = \
            _read_f32s(data, offset, 9, "building orientation")
        item_id, offset = read_i16(data, offset)
        model_index, offset = read_i16(data, offset)
        return dict(index=index, area_index=area_index,
                    local_offset_x=x, local_offset_y=y, local_offset_z=z,
                    local_offset_x2=x2, local_offset_y2=y2, local_offset_z2=z2,
                    yaw=yaw, yaw2=yaw2, tilt=tilt,
                    item_id=item_id, model_index=model_index), offset

    @staticmethod
    def _read_legacy(data: bytes, offset: int, tag: int):
        ensure_available(data, offset, LEGACY_HEAD_SIZE, "building header")
        area_index, offset = read_i8(data, offset)
        (x, y, z, x2, y2, z2, yaw, yaw2), offset = \
            _read_f32s(data, offset, 8, "building orientation")
        item_id, offset = read_i16(data, offset)
        model_index, offset = read_i16(data, offset)
        return dict(index=tag, area_index=area_index,
                    local_offset_x=x, local_offset_y=y, local_offset_z=z,
                    local_offset_x2=x2, local_offset_y2=y2, local_offset_z2=z2,
                    yaw=yaw, yaw2=yaw2,
                    item_id=item_id, model_index=model_index), offset

    @staticmethod
    def _read_suffix(data: bytes, offset: int, values: dict) -> int:
        ensure_available(data, offset, SUFFIX_SIZE, "building links")
        values['output_object_index'], offset = read_i32(data, offset)
        values['input_object_index'], offset = read_i32(data, offset)
        values['output_to_slot'], offset = read_i8(data, offset)
        values['input_from_slot'], offset = read_i8(data, offset)
        values['output_from_slot'], offset = read_i8(data, offset)
        values['input_to_slot'], offset = read_i8(data, offset)
        values['output_offset'], offset = read_i8(data, offset)
        values['input_offset'], offset = read_i8(data, offset)
        values['recipe_id'], offset = read_i16(data, offset)
        values['filter_id'], offset = read_i16(data, offset)
        parameter_count, offset = read_i16(data, offset)

        if parameter_count < 0:
            raise CorruptedDataError(
                f"Negative building parameter count {parameter_count} at offset 0x{offset - 2:04X}")
        ensure_available(data, offset, 4 * parameter_count, "building parameters")
        parameters = []
        for _ in range(parameter_count):
            value, offset = read_i32(data, offset)
            parameters.append(value)
        values['parameters'] = tuple(parameters)
        return offset

    # =========================================================================
    # Encoding
    # =========================================================================

    def serialize(self) -> bytes:
        """Encode the record in the layout selected by its tag."""
        out = bytearray()
        layout = self.layout

        if layout.item_dependent:
            write_i32(out, self.tag)
            write_i32(out, self.index)
            write_i16(out, self.item_id)
            write_i16(out, self.model_index)
            write_i8(out, self.area_index)
            for value in (self.local_offset_x, self.local_offset_y,
                          self.local_offset_z, self.yaw):
                write_f32(out, value)

            secondary = (self.local_offset_x2, self.local_offset_y2, self.local_offset_z2)
            item = item_from_id(self.item_id)
            if item.is_sorter():
                orientation = (self.tilt, self.pitch) + secondary + \
                              (self.yaw2, self.tilt2, self.pitch2)
            elif item.is_conveyor_belt():
                orientation = (self.tilt,)
                if layout is BuildingLayout.CONTENT:
                    orientation += secondary
            elif layout is BuildingLayout.CONTENT:
                orientation = secondary
            else:
                orientation = ()
            for value in orientation:
                write_f32(out, value)

        elif layout is BuildingLayout.FIXED_ORIENTATION:
            write_i32(out, self.tag)
            write_i32(out, self.index)
            write_i8(out, self.area_index)
            for value in (self.local_offset_x, self.local_offset_y, self.local_offset_z,
                          self.local_offset_x2, self.local_offset_y2, self.local_offset_z2,
                          self.yaw, self.yaw2, self.tilt):
                write_f32(out, value)
            write_i16(out, self.item_id)
            write_i16(out, self.model_index)

        else:
            write_i32(out, self.index)
            write_i8(out, self.area_index)
            for value in (self.local_offset_x, self.local_offset_y, self.local_offset_z,
                          self.local_offset_x2, self.local_offset_y2, self.local_offset_z2,
                          self.yaw, self.yaw2):
                write_f32(out, value)
            write_i16(out, self.item_id)
            write_i16(out, self.model_index)

        write_i32(out, self.output_object_index)
        write_i32(out, self.input_object_index)
        for value in (self.output_to_slot, self.input_from_slot, self.output_from_slot,
                      self.input_to_slot, self.output_offset, self.input_offset):
            write_i8(out, value)
        write_i16(out, self.recipe_id)
        write_i16(out, self.filter_id)
        write_i16(out, len(self.parameters))
        for value in self.parameters:
            write_i32(out, value)

        if layout is BuildingLayout.CONTENT:
            write_i32(out, len(self.content))
            out.extend(self.content)

        return bytes(out)

    # =========================================================================
    # Queries
    # =========================================================================

    def item(self) -> Optional[DysonSphereItem]:
        """Catalog item of this building, or None if the id is unknown."""
        return find_item(self.item_id)

    def get_parameters(self) -> BuildingParameters:
        """Decode the parameter array for building kinds that have a known layout."""
        item = self.item()
        if item is DysonSphereItem.PLANETARY_LOGISTICS_STATION:
            return StationParameters.from_raw(self.parameters, PLANETARY_STORAGE_LEN,
                                              STATION_SLOTS_LEN)
        if item is DysonSphereItem.INTERSTELLAR_LOGISTICS_STATION:
            return StationParameters.from_raw(self.parameters, INTERSTELLAR_STORAGE_LEN,
                                              STATION_SLOTS_LEN)
        return RawParameters(self.parameters)

    def to_dict(self) -> dict:
        result = {}
        for f in fields(self):
            result[f.name] = getattr(self, f.name)
        result['layout'] = self.layout.value
        result['parameters'] = list(self.parameters)
        result['content'] = self.content.hex()
        return result

    @classmethod
    def from_dict(cls, values: dict) -> 'BlueprintBuilding':
        values = dict(values)
        values.pop('layout', None)
        values['parameters'] = tuple(values.get('parameters', ()))
        values['content'] = bytes.fromhex(values.get('content', ''))
        return cls(**values)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def __str__(self):
        return (f"Building(index={self.index}, layout={self.layout.value}, "
                f"item={self.item_id}, params={len(self.parameters)})")
