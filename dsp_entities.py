#!/usr/bin/env python3
"""
Dyson Sphere Program Catalogs
=============================

Closed enumerations for the numeric ids that appear in blueprints:

- DysonSphereItem: item / building ids (building records store these as i16)
- BuildingType:    building category ids
- IconLayout:      blueprint icon layout ids (second envelope field)

Lookup helpers raise UnknownCatalogValueError when an id has no entry;
find_item() is the non-raising variant used for post-parse queries.
"""

from enum import IntEnum
from typing import Optional

from bp_errors import UnknownCatalogValueError


class DysonSphereItem(IntEnum):
    """Item ids as stored in blueprint data"""
    LAVA = -1

    # Natural resources
    WATER = 1000
    IRON_ORE = 1001
    COPPER_ORE = 1002
    SILICON_ORE = 1003
    TITANIUM_ORE = 1004
    STONE = 1005
    COAL = 1006
    CRUDE_OIL = 1007
    FIRE_ICE = 1011
    KIMBERLITE_ORE = 1012
    FRACTAL_SILICON = 1013
    OPTICAL_GRATING_CRYSTAL = 1014
    SPINIFORM_STALAGMITE_CRYSTAL = 1015
    UNIPOLAR_MAGNET = 1016
    LOG = 1030
    PLANT_FUEL = 1031

    # Materials
    IRON_INGOT = 1101
    MAGNET = 1102
    STEEL = 1103
    COPPER_INGOT = 1104
    HIGH_PURITY_SILICON = 1105
    TITANIUM_INGOT = 1106
    TITANIUM_ALLOY = 1107
    STONE_BRICK = 1108
    ENERGETIC_GRAPHITE = 1109
    GLASS = 1110
    PRISM = 1111
    DIAMOND = 1112
    CRYSTAL_SILICON = 1113
    REFINED_OIL = 1114
    PLASTIC = 1115
    SULFURIC_ACID = 1116
    ORGANIC_CRYSTAL = 1117
    TITANIUM_CRYSTAL = 1118
    TITANIUM_GLASS = 1119
    HYDROGEN = 1120
    DEUTERIUM = 1121
    ANTIMATTER = 1122
    GRAPHENE = 1123
    CARBON_NANOTUBE = 1124
    FRAME_MATERIAL = 1125
    CASIMIR_CRYSTAL = 1126
    STRANGE_MATTER = 1127
    COMBUSTIBLE_UNIT = 1128
    FOUNDATION = 1131
    ACCELERANT_MK_I = 1141
    ACCELERANT_MK_II = 1142
    ACCELERANT_MK_III = 1143

    # Components
    GEAR = 1201
    MAGNETIC_COIL = 1202
    ELECTRIC_MOTOR = 1203
    ELECTROMAGNETIC_TURBINE = 1204
    SUPER_MAGNETIC_RING = 1205
    PARTICLE_CONTAINER = 1206
    CRITICAL_PHOTON = 1208
    GRAVITON_LENS = 1209
    SPACE_WARPER = 1210
    CIRCUIT_BOARD = 1301
    MICROCRYSTALLINE_COMPONENT = 1302
    PROCESSOR = 1303
    PLANE_FILTER = 1304
    QUANTUM_CHIP = 1305
    PLASMA_EXCITER = 1401
    PARTICLE_BROADBAND = 1402
    ANNIHILATION_CONSTRAINT_SPHERE = 1403
    PHOTON_COMBINER = 1404
    THRUSTER = 1405
    REINFORCED_THRUSTER = 1406
    SOLAR_SAIL = 1501
    DYSON_SPHERE_COMPONENT = 1502
    SMALL_CARRIER_ROCKET = 1503
    HYDROGEN_FUEL_ROD = 1801
    DEUTERON_FUEL_ROD = 1802
    ANTIMATTER_FUEL_ROD = 1803

    # Logistics
    CONVEYOR_BELT_MK_I = 2001
    CONVEYOR_BELT_MK_II = 2002
    CONVEYOR_BELT_MK_III = 2003
    SORTER_MK_I = 2011
    SORTER_MK_II = 2012
    SORTER_MK_III = 2013
    SPLITTER = 2020
    STORAGE_MK_I = 2101
    STORAGE_MK_II = 2102
    PLANETARY_LOGISTICS_STATION = 2103
    INTERSTELLAR_LOGISTICS_STATION = 2104
    ORBITAL_COLLECTOR = 2105
    STORAGE_TANK = 2106

    # Power
    TESLA_TOWER = 2201
    WIRELESS_POWER_TOWER = 2202
    WIND_TURBINE = 2203
    THERMAL_POWER_STATION = 2204
    SOLAR_PANEL = 2205
    ACCUMULATOR = 2206
    ACCUMULATOR_FULL = 2207
    RAY_RECEIVER = 2208
    ENERGY_EXCHANGER = 2209
    ARTIFICIAL_STAR = 2210
    MINI_FUSION_POWER_STATION = 2211
    SATELLITE_SUBSTATION = 2212

    # Production
    MINING_MACHINE = 2301
    SMELTER = 2302
    ASSEMBLING_MACHINE_MK_I = 2303
    ASSEMBLING_MACHINE_MK_II = 2304
    ASSEMBLING_MACHINE_MK_III = 2305
    WATER_PUMP = 2306
    OIL_EXTRACTOR = 2307
    OIL_REFINERY = 2308
    CHEMICAL_PLANT = 2309
    MINIATURE_PARTICLE_COLLIDER = 2310
    EM_RAIL_EJECTOR = 2311
    VERTICAL_LAUNCHING_SILO = 2312
    SPRAY_COATER = 2313
    FRACTIONATOR = 2314
    PLANE_SMELTER = 2315
    RECOMPOSING_ASSEMBLER = 2318
    NEGENTROPY_SMELTER = 2319
    MATRIX_LAB = 2901
    SELF_EVOLUTION_LAB = 2902

    # Logistics units
    LOGISTICS_DRONE = 5001
    LOGISTICS_VESSEL = 5002
    LOGISTICS_BOT = 5003

    # Matrices
    ELECTROMAGNETIC_MATRIX = 6001
    ENERGY_MATRIX = 6002
    STRUCTURE_MATRIX = 6003
    INFORMATION_MATRIX = 6004
    GRAVITY_MATRIX = 6005
    UNIVERSE_MATRIX = 6006

    def is_conveyor_belt(self) -> bool:
        return 2000 < self.value < 2010

    def is_sorter(self) -> bool:
        return 2010 < self.value < 2020

    def is_land(self) -> bool:
        return self is DysonSphereItem.FOUNDATION

    def is_assembling_machine(self) -> bool:
        return self in (DysonSphereItem.ASSEMBLING_MACHINE_MK_I,
                        DysonSphereItem.ASSEMBLING_MACHINE_MK_II,
                        DysonSphereItem.ASSEMBLING_MACHINE_MK_III,
                        DysonSphereItem.RECOMPOSING_ASSEMBLER)

    def is_smelter(self) -> bool:
        return self in (DysonSphereItem.SMELTER,
                        DysonSphereItem.PLANE_SMELTER,
                        DysonSphereItem.NEGENTROPY_SMELTER)

    def is_station(self) -> bool:
        return self in (DysonSphereItem.PLANETARY_LOGISTICS_STATION,
                        DysonSphereItem.INTERSTELLAR_LOGISTICS_STATION)


class BuildingType(IntEnum):
    """Building category ids"""
    NONE = 0
    MINER = 1
    SPLITTER = 2
    STORAGE = 3
    TANK = 4
    ASSEMBLER = 5
    INSERTER = 6
    EJECTOR = 7
    LAB = 8
    STATION = 9
    DISPENSER = 10
    TURRET = 11
    GAMMA = 12
    EXCHANGER = 13
    BELT = 14
    MONITOR = 15
    SILO = 16
    ARTIFICIAL_STAR = 17
    BATTLE_BASE = 18
    GEOTHERMAL = 19
    MARKER = 20
    OTHER = 99


class IconLayout(IntEnum):
    """Icon layout ids (envelope field 2)"""
    NONE = 0
    NO_ICON = 1
    ONE_ICON = 10
    ONE_ICON_SMALL = 11
    TWO_ICON_46 = 20
    TWO_ICON_53 = 21
    TWO_ICON_59 = 22
    TWO_ICON_57 = 23
    TWO_ICON_51 = 24
    THREE_ICON_813 = 30
    THREE_ICON_279 = 31
    THREE_ICON_573 = 32
    THREE_ICON_591 = 33
    FOUR_ICON_7913 = 40
    FOUR_ICON_8462 = 41
    FIVE_ICON_57913 = 50
    FIVE_ICON_PENTA = 51


# =============================================================================
# Lookup Helpers
# =============================================================================

def _lookup(enum_cls, kind: str, value: int):
    try:
        return enum_cls(value)
    except ValueError:
        raise UnknownCatalogValueError(kind, value) from None


def item_from_id(item_id: int) -> DysonSphereItem:
    """
    Resolve an item id.

    Raises:
        UnknownCatalogValueError: if the id is not in the catalog
    """
    return _lookup(DysonSphereItem, "item", item_id)


def find_item(item_id: int) -> Optional[DysonSphereItem]:
    """Resolve an item id, or None if it is not in the catalog."""
    try:
        return DysonSphereItem(item_id)
    except ValueError:
        return None


def building_type_from_id(type_id: int) -> BuildingType:
    return _lookup(BuildingType, "building type", type_id)


def icon_layout_from_id(layout_id: int) -> IconLayout:
    return _lookup(IconLayout, "icon layout", layout_id)


def format_item(item_id: int) -> str:
    """Format an item id with its name for reports, e.g. '2103 (PLANETARY_LOGISTICS_STATION)'"""
    item = find_item(item_id)
    if item is None:
        return f"{item_id} (unknown)"
    return f"{item_id} ({item.name})"
