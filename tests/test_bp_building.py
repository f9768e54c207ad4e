import struct

import pytest

from bp_building import BlueprintBuilding, BuildingLayout, RawParameters
from bp_errors import CorruptedDataError, InsufficientDataError, UnknownCatalogValueError
from bp_station import StationParameters
from dsp_entities import DysonSphereItem

ASSEMBLER = int(DysonSphereItem.ASSEMBLING_MACHINE_MK_I)
BELT = int(DysonSphereItem.CONVEYOR_BELT_MK_I)
SORTER = int(DysonSphereItem.SORTER_MK_I)


def suffix(params=(), recipe=0):
    out = struct.pack("<ii6bhhh", 7, -1, 1, 2, 3, 4, 5, 6, recipe, 0, len(params))
    return out + b"".join(struct.pack("<i", p) for p in params)


def item_head(tag, index, item_id, model=45, area=0, xyz=(1.0, 2.0, 3.0), yaw=90.0):
    return struct.pack("<iihhb4f", tag, index, item_id, model, area, *xyz, yaw)


@pytest.mark.parametrize("tag, layout", [
    (-200, BuildingLayout.CONTENT),
    (-102, BuildingLayout.CONTENT),
    (-101, BuildingLayout.ITEM_ORIENTED),
    (-100, BuildingLayout.FIXED_ORIENTATION),
    (-99, BuildingLayout.LEGACY),
    (0, BuildingLayout.LEGACY),
    (12, BuildingLayout.LEGACY),
])
def test_layout_from_tag(tag, layout):
    assert BuildingLayout.from_tag(tag) is layout


def test_content_layout_other_item():
    data = item_head(-102, 5, ASSEMBLER) + struct.pack("<3f", 4.0, 5.0, 6.0) \
        + suffix((10, 20), recipe=50) + struct.pack("<i", 3) + b"\x01\x02\x03"
    building, offset = BlueprintBuilding.deserialize(data)
    assert offset == len(data)
    assert building.layout is BuildingLayout.CONTENT
    assert building.index == 5
    assert building.item_id == ASSEMBLER
    assert building.model_index == 45
    assert (building.local_offset_x, building.local_offset_y, building.local_offset_z) == (1.0, 2.0, 3.0)
    assert (building.local_offset_x2, building.local_offset_y2, building.local_offset_z2) == (4.0, 5.0, 6.0)
    assert building.yaw == building.yaw2 == 90.0
    assert building.tilt == building.tilt2 == building.pitch == building.pitch2 == 0.0
    assert building.output_object_index == 7
    assert building.input_object_index == -1
    assert (building.output_to_slot, building.input_from_slot, building.output_from_slot,
            building.input_to_slot, building.output_offset, building.input_offset) == (1, 2, 3, 4, 5, 6)
    assert building.recipe_id == 50
    assert building.parameters == (10, 20)
    assert building.content == b"\x01\x02\x03"
    assert building.serialize() == data


def test_content_layout_belt():
    data = item_head(-102, 1, BELT) + struct.pack("<f", 0.5) \
        + struct.pack("<3f", 7.0, 8.0, 9.0) + suffix() + struct.pack("<i", 0)
    building, offset = BlueprintBuilding.deserialize(data)
    assert offset == len(data)
    assert building.tilt == building.tilt2 == 0.5
    assert building.pitch == building.pitch2 == 0.0
    assert building.yaw2 == building.yaw
    assert building.local_offset_x2 == 7.0
    assert building.content == b""
    assert building.serialize() == data


def test_item_oriented_belt_copies_offsets():
    data = item_head(-101, 1, BELT) + struct.pack("<f", 0.5) + suffix()
    building, offset = BlueprintBuilding.deserialize(data)
    assert offset == len(data)
    assert building.layout is BuildingLayout.ITEM_ORIENTED
    assert building.tilt == building.tilt2 == 0.5
    assert (building.local_offset_x2, building.local_offset_y2, building.local_offset_z2) == (1.0, 2.0, 3.0)
    assert building.serialize() == data


@pytest.mark.parametrize("tag", [-102, -101])
def test_sorter_reads_full_orientation(tag):
    orientation = struct.pack("<8f", 0.25, 0.5, 4.0, 5.0, 6.0, 180.0, 0.75, 1.0)
    data = item_head(tag, 2, SORTER) + orientation + suffix()
    if tag == -102:
        data += struct.pack("<i", 0)
    building, offset = BlueprintBuilding.deserialize(data)
    assert offset == len(data)
    assert (building.tilt, building.pitch) == (0.25, 0.5)
    assert (building.local_offset_x2, building.local_offset_y2, building.local_offset_z2) == (4.0, 5.0, 6.0)
    assert (building.yaw2, building.tilt2, building.pitch2) == (180.0, 0.75, 1.0)
    assert building.serialize() == data


def test_item_oriented_other_item():
    data = item_head(-101, 3, ASSEMBLER) + suffix((1,))
    building, offset = BlueprintBuilding.deserialize(data)
    assert offset == len(data)
    assert building.local_offset_x2 == building.local_offset_x
    assert building.yaw2 == building.yaw
    assert building.tilt == 0.0
    assert building.serialize() == data


def test_unknown_item_in_item_oriented_layout():
    data = item_head(-101, 3, 4242) + suffix()
    with pytest.raises(UnknownCatalogValueError):
        BlueprintBuilding.deserialize(data)


def test_fixed_orientation():
    data = struct.pack("<iib9fhh", -100, 9, 1, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 90.0, 270.0, 0.5,
                       4242, 12) + suffix((3, 4, 5))
    building, offset = BlueprintBuilding.deserialize(data)
    assert offset == len(data)
    assert building.layout is BuildingLayout.FIXED_ORIENTATION
    assert building.index == 9
    assert building.area_index == 1
    assert (building.yaw, building.yaw2, building.tilt) == (90.0, 270.0, 0.5)
    assert building.tilt2 == building.pitch == building.pitch2 == 0.0
    # Unknown items are fine outside the item-oriented layouts
    assert building.item_id == 4242
    assert building.item() is None
    assert building.serialize() == data


def test_legacy_layout_uses_tag_as_index():
    data = struct.pack("<ib8fhh", 17, 0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 90.0, 90.0,
                       ASSEMBLER, 65) + suffix()
    building, offset = BlueprintBuilding.deserialize(data)
    assert offset == len(data)
    assert building.layout is BuildingLayout.LEGACY
    assert building.index == 17
    assert building.tilt == building.pitch == 0.0
    assert building.item() is DysonSphereItem.ASSEMBLING_MACHINE_MK_I
    assert building.serialize() == data


def test_negative_parameter_count():
    data = item_head(-101, 3, ASSEMBLER) + struct.pack("<ii6bhhh", -1, -1, 0, 0, 0, 0, 0, 0, 0, 0, -1)
    with pytest.raises(CorruptedDataError):
        BlueprintBuilding.deserialize(data)


def test_negative_content_length_reads_empty():
    data = item_head(-102, 1, ASSEMBLER) + struct.pack("<3f", 0, 0, 0) + suffix() + struct.pack("<i", -5)
    building, offset = BlueprintBuilding.deserialize(data)
    assert offset == len(data)
    assert building.content == b""


@pytest.mark.parametrize("cut", [3, 10, 30, 50])
def test_truncated_record(cut):
    data = item_head(-102, 5, ASSEMBLER) + struct.pack("<3f", 4.0, 5.0, 6.0) \
        + suffix((10, 20)) + struct.pack("<i", 3) + b"\x01\x02\x03"
    with pytest.raises(InsufficientDataError):
        BlueprintBuilding.deserialize(data[:cut])
    with pytest.raises(InsufficientDataError):
        BlueprintBuilding.deserialize(data[:-1])


def test_constructed_record_round_trip():
    building = BlueprintBuilding(tag=-100, index=4, item_id=2303, model_index=65,
                                 local_offset_x=1.5, yaw=90.0, parameters=[1, 2])
    decoded, _ = BlueprintBuilding.deserialize(building.serialize())
    assert decoded == building
    assert decoded.parameters == (1, 2)


def test_station_parameters():
    params = [0] * 332
    params[0] = 1001
    planetary = BlueprintBuilding(tag=-101, item_id=2103, parameters=params)
    interstellar = BlueprintBuilding(tag=-101, item_id=2104, parameters=params)
    result = planetary.get_parameters()
    assert isinstance(result, StationParameters)
    assert result.is_planetary()
    assert result.storage[0].item_id == 1001
    assert interstellar.get_parameters().is_interstellar()


def test_raw_parameters_for_other_items():
    building = BlueprintBuilding(tag=-101, item_id=ASSEMBLER, parameters=(1, 2, 3))
    assert building.get_parameters() == RawParameters((1, 2, 3))
    unknown = BlueprintBuilding(tag=0, item_id=3009, parameters=(9,))
    assert unknown.get_parameters() == RawParameters((9,))


def test_dict_round_trip():
    data = item_head(-102, 5, ASSEMBLER) + struct.pack("<3f", 4.0, 5.0, 6.0) \
        + suffix((10, 20)) + struct.pack("<i", 2) + b"\xab\xcd"
    building, _ = BlueprintBuilding.deserialize(data)
    values = building.to_dict()
    assert values['layout'] == 'content'
    assert values['content'] == 'abcd'
    assert values['parameters'] == [10, 20]
    assert BlueprintBuilding.from_dict(values) == building


def test_legacy_index_must_match_tag():
    with pytest.raises(CorruptedDataError):
        BlueprintBuilding(tag=0, index=5, item_id=ASSEMBLER)
    with pytest.raises(CorruptedDataError):
        BlueprintBuilding.from_dict(dict(BlueprintBuilding(tag=3, index=3).to_dict(), index=-100))


def test_legacy_round_trip_keeps_tag():
    building = BlueprintBuilding(tag=5, index=5, item_id=ASSEMBLER, model_index=65)
    decoded, _ = BlueprintBuilding.deserialize(building.serialize())
    assert decoded.tag == 5
    assert decoded == building


def test_out_of_range_field_fails_to_serialize():
    building = BlueprintBuilding(tag=-100, index=1, area_index=300, item_id=ASSEMBLER)
    with pytest.raises(CorruptedDataError):
        building.serialize()
