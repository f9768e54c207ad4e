import pytest

from bp_errors import UnknownCatalogValueError
from bp_station import (LogisticsStationDirection, PARAMETERS_OFFSET, SLOTS_OFFSET,
                        StationParameters, UnknownDirection, direction_from_byte)
from dsp_entities import DysonSphereItem


def make_params():
    params = [0] * (PARAMETERS_OFFSET + 12)
    # storage 0: iron ore, storage 2: hydrogen
    params[0:6] = [1001, 1, 2, 5000, 0, 0]
    params[12:18] = [1120, 2, 1, 10000, 1, 3]
    # slot 0 routes storage 1 south, slot 3 has an unknown direction
    params[SLOTS_OFFSET:SLOTS_OFFSET + 2] = [2, 1]
    params[SLOTS_OFFSET + 12:SLOTS_OFFSET + 14] = [7, 3]
    settings = [3000000, 180, 24000, 1, 60, 1, 50, 10, 4, 999, 1, 0, 7, 8, 9]
    params[PARAMETERS_OFFSET:PARAMETERS_OFFSET + 12] = settings[:12]
    return params


def test_storage_entries():
    station = StationParameters.from_raw(make_params(), 5, 12)
    assert len(station.storage) == 5
    assert station.storage[0].item_id == 1001
    assert station.storage[0].max_count == 5000
    assert station.storage[0].item() is DysonSphereItem.IRON_ORE
    assert station.storage[1] is None
    assert station.storage[2].keep_mode == 1
    assert station.storage[2].keep_inc == 3
    assert station.storage[3] is None
    assert station.is_interstellar()
    assert not station.is_planetary()


def test_slots_and_directions():
    station = StationParameters.from_raw(make_params(), 4, 12)
    assert len(station.slots) == 12
    assert station.slots[0].direction is LogisticsStationDirection.SOUTH
    assert station.slots[0].storage_index == 1
    assert station.slots[1] is None
    assert station.slots[3].direction == UnknownDirection(7)
    assert station.slots[3].direction.name == "UNKNOWN_7"
    assert station.is_planetary()


def test_settings():
    settings = StationParameters.from_raw(make_params(), 4, 12).parameters
    assert settings.work_energy == 3000000
    assert settings.drone_range == 180
    assert settings.vessel_range == 24000
    assert settings.orbital_collector is True
    assert settings.warp_distance == 60
    assert settings.equip_warper is True
    assert settings.drone_count == 50
    assert settings.vessel_count == 10
    assert settings.piler_count == 4
    assert settings.drone_auto_replenish is True
    assert settings.vessel_auto_replenish is False


def test_flag_only_true_for_one():
    params = make_params()
    params[PARAMETERS_OFFSET + 3] = 2
    settings = StationParameters.from_raw(params, 4, 12).parameters
    assert settings.orbital_collector is False


def test_short_parameter_array_reads_zero():
    station = StationParameters.from_raw([1001, 1, 1, 100, 0, 0], 4, 12)
    assert station.storage[0].item_id == 1001
    assert all(slot is None for slot in station.slots)
    assert station.parameters.work_energy == 0
    assert station.parameters.equip_warper is False


def test_direction_from_byte_masks():
    assert direction_from_byte(0x101) is LogisticsStationDirection.EAST
    assert direction_from_byte(-1) == UnknownDirection(255)


def test_unknown_storage_item():
    params = make_params()
    params[0] = 4242
    station = StationParameters.from_raw(params, 4, 12)
    with pytest.raises(UnknownCatalogValueError):
        station.storage[0].item()


def test_to_dict():
    result = StationParameters.from_raw(make_params(), 4, 12).to_dict()
    assert result['storage'][0]['item_id'] == 1001
    assert result['storage'][1] is None
    assert result['slots'][0] == {'direction': 'SOUTH', 'storage_index': 1}
    assert result['slots'][3]['direction'] == 'UNKNOWN_7'
    assert result['parameters']['piler_count'] == 4
