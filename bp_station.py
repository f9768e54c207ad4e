#!/usr/bin/env python3
"""
Logistics Station Parameter Block
=================================

Planetary and interstellar logistics stations store their configuration in
the generic i32 parameter array of their building record. The array is laid
out in three fixed regions (element offsets, not bytes):

| Region   | Start | Stride | Entries                               |
|----------|-------|--------|---------------------------------------|
| Storage  | 0     | 6      | 4 (planetary) / 5 (interstellar)      |
| Slots    | 192   | 4      | 12 for both station kinds             |
| Settings | 320   | 1      | scalar settings, see SETTINGS_LAYOUT  |

Storage entry:  [item_id, local_logic, remote_logic, max_count, keep_mode, keep_inc]
                item_id == 0 means the slot is empty.
Slot entry:     [direction, storage_index, ?, ?]
                storage_index == 0 means nothing is routed through the slot.

Settings positions 9 (vein collector mining speed), 12-13 (group priority)
and 14 (route priority) are not decoded.
"""

import json
from dataclasses import dataclass, asdict
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple, Union

from dsp_entities import DysonSphereItem, item_from_id

STORAGE_OFFSET = 0
SLOTS_OFFSET = STORAGE_OFFSET + 192
PARAMETERS_OFFSET = SLOTS_OFFSET + 128

STORAGE_STRIDE = 6
SLOT_STRIDE = 4

PLANETARY_STORAGE_LEN = 4
INTERSTELLAR_STORAGE_LEN = 5
STATION_SLOTS_LEN = 12


class LogisticsStationDirection(IntEnum):
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3


@dataclass(frozen=True)
class UnknownDirection:
    """Direction byte with no named value"""
    raw: int

    @property
    def name(self) -> str:
        return f"UNKNOWN_{self.raw}"


Direction = Union[LogisticsStationDirection, UnknownDirection]


def direction_from_byte(value: int) -> Direction:
    value &= 0xFF
    try:
        return LogisticsStationDirection(value)
    except ValueError:
        return UnknownDirection(value)


@dataclass(frozen=True)
class StorageEntry:
    item_id: int
    local_logic: int
    remote_logic: int
    max_count: int
    keep_mode: int
    keep_inc: int

    def item(self) -> DysonSphereItem:
        """Raises UnknownCatalogValueError for ids missing from the catalog."""
        return item_from_id(self.item_id)


@dataclass(frozen=True)
class SlotEntry:
    direction: Direction
    storage_index: int

    def to_dict(self) -> dict:
        return {'direction': self.direction.name, 'storage_index': self.storage_index}


@dataclass(frozen=True)
class StationSettings:
    work_energy: int
    drone_range: int
    vessel_range: int
    orbital_collector: bool
    warp_distance: int
    equip_warper: bool
    drone_count: int
    vessel_count: int
    piler_count: int
    drone_auto_replenish: bool
    vessel_auto_replenish: bool


# (field name, position in settings region, stored as 0/1 flag)
SETTINGS_LAYOUT = [
    ('work_energy', 0, False),
    ('drone_range', 1, False),
    ('vessel_range', 2, False),
    ('orbital_collector', 3, True),
    ('warp_distance', 4, False),
    ('equip_warper', 5, True),
    ('drone_count', 6, False),
    ('vessel_count', 7, False),
    ('piler_count', 8, False),
    ('drone_auto_replenish', 10, True),
    ('vessel_auto_replenish', 11, True),
]


def _param(params: Sequence[int], index: int) -> int:
    # Missing trailing elements read as zero
    if index < len(params):
        return params[index]
    return 0


@dataclass(frozen=True)
class StationParameters:
    storage: Tuple[Optional[StorageEntry], ...]
    slots: Tuple[Optional[SlotEntry], ...]
    parameters: StationSettings

    @classmethod
    def from_raw(cls, params: Sequence[int], storage_len: int,
                 slots_len: int) -> 'StationParameters':
        return cls(
            storage=tuple(cls._parse_storage(params, storage_len)),
            slots=tuple(cls._parse_slots(params, slots_len)),
            parameters=cls._parse_settings(params),
        )

    @staticmethod
    def _parse_storage(params: Sequence[int], storage_len: int) -> List[Optional[StorageEntry]]:
        storage = []
        for i in range(storage_len):
            offset = STORAGE_OFFSET + i * STORAGE_STRIDE
            item_id = _param(params, offset)
            if item_id == 0:
                storage.append(None)
                continue
            storage.append(StorageEntry(
                item_id=item_id,
                local_logic=_param(params, offset + 1),
                remote_logic=_param(params, offset + 2),
                max_count=_param(params, offset + 3),
                keep_mode=_param(params, offset + 4),
                keep_inc=_param(params, offset + 5),
            ))
        return storage

    @staticmethod
    def _parse_slots(params: Sequence[int], slots_len: int) -> List[Optional[SlotEntry]]:
        slots = []
        for i in range(slots_len):
            offset = SLOTS_OFFSET + i * SLOT_STRIDE
            storage_index = _param(params, offset + 1)
            if storage_index == 0:
                slots.append(None)
                continue
            slots.append(SlotEntry(
                direction=direction_from_byte(_param(params, offset)),
                storage_index=storage_index,
            ))
        return slots

    @staticmethod
    def _parse_settings(params: Sequence[int]) -> StationSettings:
        values = {}
        for name, position, is_flag in SETTINGS_LAYOUT:
            raw = _param(params, PARAMETERS_OFFSET + position)
            values[name] = (raw == 1) if is_flag else raw
        return StationSettings(**values)

    def is_planetary(self) -> bool:
        return len(self.storage) == PLANETARY_STORAGE_LEN

    def is_interstellar(self) -> bool:
        return len(self.storage) == INTERSTELLAR_STORAGE_LEN

    def to_dict(self) -> dict:
        return {
            'storage': [asdict(s) if s is not None else None for s in self.storage],
            'slots': [s.to_dict() if s is not None else None for s in self.slots],
            'parameters': asdict(self.parameters),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
