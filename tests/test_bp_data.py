import struct

import pytest

from bp_area import BlueprintArea
from bp_building import BlueprintBuilding
from bp_data import (BlueprintData, BlueprintDataHeader, BlueprintDataParser,
                     BuildingHeader)
from bp_errors import CorruptedDataError, InsufficientDataError


def header_bytes(patch=1, primary=0, area_count=1):
    return struct.pack("<7ib", patch, 2, 3, 0, 4, 5, primary, area_count)


def area(segments=200, anchor_x=0, index=0):
    return BlueprintArea(index=index, parent_index=-1, tropic_anchor=0,
                         area_segments=segments, anchor_local_offset_x=anchor_x,
                         anchor_local_offset_y=0, width=10, height=8)


def building(index):
    return BlueprintBuilding(tag=-100, index=index, item_id=2303, model_index=65,
                             local_offset_x=float(index), parameters=(index,))


def payload(patch=1, areas=None, buildings=()):
    areas = [area()] if areas is None else areas
    out = header_bytes(patch=patch, area_count=len(areas))
    out += b"".join(a.serialize() for a in areas)
    out += struct.pack("<i", len(buildings))
    out += b"".join(b.serialize() for b in buildings)
    return out


def test_header_fields():
    header, offset = BlueprintDataHeader.deserialize(header_bytes())
    assert offset == BlueprintDataHeader.SIZE == 29
    assert header == BlueprintDataHeader(patch=1, cursor_offset_x=2, cursor_offset_y=3,
                                         cursor_target_area=0, dragbox_size_x=4,
                                         dragbox_size_y=5, primary_area_index=0,
                                         area_count=1)
    assert header.serialize() == header_bytes()


@pytest.mark.parametrize("area_count, primary, valid", [
    (64, 0, True),
    (65, 0, False),
    (-1, 0, False),
    (0, 0, True),
    (3, -1, True),
    (3, 3, True),
    (3, 4, False),
    (3, -2, False),
])
def test_header_bounds(area_count, primary, valid):
    data = header_bytes(primary=primary, area_count=area_count)
    if valid:
        header, _ = BlueprintDataHeader.deserialize(data)
        assert header.area_count == area_count
    else:
        with pytest.raises(CorruptedDataError):
            BlueprintDataHeader.deserialize(data)


def test_header_too_short():
    with pytest.raises(InsufficientDataError):
        BlueprintDataHeader.deserialize(header_bytes()[:28])


def test_building_header():
    assert BuildingHeader.deserialize(struct.pack("<i", 3)) == (BuildingHeader(3), 4)
    with pytest.raises(CorruptedDataError):
        BuildingHeader.deserialize(struct.pack("<i", -1))
    assert BuildingHeader(3).serialize() == struct.pack("<i", 3)


def test_parse_full_payload():
    buildings = [building(0), building(1)]
    raw = payload(areas=[area(index=0), area(index=1)], buildings=buildings)
    data = BlueprintData.deserialize(raw)
    assert data.header.area_count == 2
    assert len(data.areas) == 2
    assert data.areas[1].index == 1
    assert list(data.buildings) == buildings
    assert data.serialize() == raw


def test_missing_buildings():
    raw = payload(buildings=[building(0)])
    with pytest.raises(InsufficientDataError):
        BlueprintData.deserialize(raw[:-4])


def test_anchor_repair_before_patch_1():
    areas = [area(segments=4, anchor_x=17, index=0), area(segments=200, anchor_x=5, index=1)]
    data = BlueprintData.deserialize(payload(patch=0, areas=areas))
    assert [a.anchor_local_offset_x for a in data.areas] == [0, 0]


def test_anchor_repair_checks_last_area():
    areas = [area(segments=200, anchor_x=5), area(segments=4, anchor_x=17, index=1)]
    data = BlueprintData.deserialize(payload(patch=0, areas=areas))
    assert [a.anchor_local_offset_x for a in data.areas] == [0, 0]


def test_no_anchor_repair_from_patch_1():
    areas = [area(segments=4, anchor_x=17), area(segments=200, anchor_x=5, index=1)]
    data = BlueprintData.deserialize(payload(patch=1, areas=areas))
    assert [a.anchor_local_offset_x for a in data.areas] == [17, 5]


def test_no_anchor_repair_without_trigger():
    areas = [area(segments=4, anchor_x=16)]
    data = BlueprintData.deserialize(payload(patch=0, areas=areas))
    assert data.areas[0].anchor_local_offset_x == 16


def test_verbose_parser_traces_offsets(capsys):
    raw = payload(buildings=[building(0)])
    BlueprintDataParser(verbose=True).parse(raw)
    out = capsys.readouterr().out
    assert "0x0000: Header(patch=1" in out
    assert "0x001D: Area(index=0" in out
    assert "1 buildings" in out


def test_quiet_parser_prints_nothing(capsys):
    BlueprintDataParser().parse(payload())
    assert capsys.readouterr().out == ""


def test_dict_round_trip():
    data = BlueprintData.deserialize(payload(buildings=[building(0), building(3)]))
    values = data.to_dict()
    assert values['header']['area_count'] == 1
    assert len(values['buildings']) == 2
    assert BlueprintData.from_dict(values) == data
