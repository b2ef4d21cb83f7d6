"""Build the JSON Schema that describes a station's harmonics definition.

The schema covers the station documents accepted and produced by the tide
web service. Several enumerations (countries, time zones, units, datums and
constituents) come from the open harmonics database and are supplied
through a :class:`TideDbCatalog`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

__all__ = [
    "TideDbCatalog",
    "add_property",
    "add_number_property",
    "add_enum_property",
    "add_table_enum_property",
    "add_object_property",
    "get_json_schema",
]

JsonObject = dict[str, Any]

SCHEMA_DIALECT = "http://json-schema.org/draft-07/schema#"

DATUM_TEXT = (
    "This is the description of which tidal datum is being used. "
    "In the U.S., it is usually 'Mean Lower Low Water'. "
    "For currents this field is irrelevant."
)
DATUM_OFFSET_TEXT = (
    "For tides, this is the elevation of Mean Sea "
    "Level (MSL) relative to the specified datum in Level Units.  For "
    "currents it is an analogous constant used to calibrate the velocity of "
    "the predicted currents against zero."
)
CONFIDENCE_TEXT = (
    "Confidence is a meaningless indicator of data "
    "quality ranging between 0 and 15 and normally initialized to 10."
)
ZONE_OFFSET_TEXT = (
    "This is the standard time to which epochs are adjusted, a.k.a. the "
    "meridian, in hours and minutes east of UTC.  The format is +/-HHMM "
    "(i.e. hours * 100 + min) with positive values being east of Greenwich "
    "and negative values west. "
    "Do not use daylight savings time."
)


@dataclass(frozen=True)
class TideDbCatalog:
    """Name tables of a harmonics database, each indexed by its stored code.

    Entry 0 of each table is the database's placeholder ("Unknown" and the
    like) and is left out of the schema's enumerations.
    """

    countries: Sequence[str] = ()
    tzfiles: Sequence[str] = ()
    level_units: Sequence[str] = ()
    dir_units: Sequence[str] = ()
    datums: Sequence[str] = ()
    constituents: Sequence[str] = ()


def _attach(parent: JsonObject, name: str, prop: JsonObject) -> JsonObject:
    properties = parent.get("properties")
    if not isinstance(properties, dict):
        properties = {}
        parent["properties"] = properties
    properties[name] = prop
    return prop


def add_property(
    parent: JsonObject, name: str, type_: str, description: str | None = None
) -> JsonObject:
    """Add a property of ``type_`` under ``parent["properties"]`` and return it."""
    prop: JsonObject = {"type": type_}
    if description is not None:
        prop["description"] = description
    return _attach(parent, name, prop)


def add_number_property(
    parent: JsonObject,
    name: str,
    type_: str = "number",
    description: str | None = None,
    minimum: Any = None,
    maximum: Any = None,
) -> JsonObject:
    """Add a numeric property with optional bounds and return it."""
    prop: JsonObject = {"type": type_}
    if description is not None:
        prop["description"] = description
    if minimum is not None:
        prop["minimum"] = minimum
    if maximum is not None:
        prop["maximum"] = maximum
    return _attach(parent, name, prop)


def add_enum_property(
    parent: JsonObject,
    name: str,
    values: Sequence[str],
    description: str | None = None,
) -> JsonObject:
    """Add a string property restricted to ``values`` and return it."""
    prop: JsonObject = {"type": "string"}
    if description is not None:
        prop["description"] = description
    prop["enum"] = list(values)
    return _attach(parent, name, prop)


def add_table_enum_property(
    parent: JsonObject,
    name: str,
    table: Sequence[str],
    description: str | None = None,
) -> JsonObject:
    """Add a string property whose choices are a database name table.

    The placeholder at index 0 is skipped; an empty table gives a property
    with no enumeration at all.
    """
    prop: JsonObject = {"type": "string"}
    if description is not None:
        prop["description"] = description
    if table:
        prop["enum"] = list(table[1:])
    return _attach(parent, name, prop)


def add_object_property(
    parent: JsonObject, name: str, description: str | None = None
) -> JsonObject:
    """Add an object property with an empty property list and return it."""
    prop: JsonObject = {"type": "object"}
    if description is not None:
        prop["description"] = description
    prop["properties"] = {}
    return _attach(parent, name, prop)


def _station_rule(station_type: str, reference: bool, required: list[str]) -> JsonObject:
    return {
        "if": {
            "properties": {
                "type": {"const": station_type},
                "referenceStation": {"const": reference},
            }
        },
        "then": {"required": required},
    }


def get_json_schema(catalog: TideDbCatalog | None) -> JsonObject:
    """Return the station-definition schema, or {} when no database is open."""
    if catalog is None:
        return {}

    schema: JsonObject = {
        "$schema": SCHEMA_DIALECT,
        "type": "object",
        "title": "XTide Station Definition",
        "description": "Values needed to define an xtide tidal or current station",
        "properties": {},
    }
    add_property(schema, "name", "string", "Tide station name")
    add_property(
        schema,
        "index",
        "number",
        "The XTide index number. Leave blank or zero for new entries. "
        "Use only recent values returned by the server for updates",
    )
    add_property(
        schema, "comments", "string",
        "Any special comments about this station. Leave blank if none.",
    )
    add_property(
        schema, "notes", "string",
        "Any special notes about this station. Leave blank if none.",
    )
    add_property(
        schema, "referenceStation", "boolean",
        "TRUE if this is a reference station, false if a subordinate station.",
    )

    add_enum_property(
        schema, "type", ["tide", "current"],
        "What type of information does this station supply?",
    )
    add_table_enum_property(schema, "country", catalog.countries)
    add_table_enum_property(schema, "timezone", catalog.tzfiles)
    add_table_enum_property(schema, "levelUnits", catalog.level_units)

    flow = add_object_property(
        schema, "flow",
        "Data for current stations only. See the XTide harmonics file documentation.",
    )
    add_number_property(
        flow, "ebbDirection", "integer",
        "This is the direction of the maximum ebb current.  Enter a number "
        "between 0 and 359, or 361 if unknown.",
        "0", "361",
    )
    add_number_property(
        flow, "floodDirection", "integer",
        "This is the direction of the maximum flood current.  Enter a number "
        "between 0 and 359, or 361 if unknown.",
        "0", "361",
    )
    add_table_enum_property(flow, "units", catalog.dir_units)

    position = add_object_property(
        schema, "position", "Location of station in 'Signed degrees' format"
    )
    add_number_property(
        position, "lat", "number",
        "Geographic lattitude. Use negative numbers for South, positive for North",
        "-90", "90",
    )
    add_number_property(
        position, "long", "number",
        "Geographic longitude. Use negative numbers for West, positive for East",
        "-180", "180",
    )
    position["required"] = ["lat", "long"]

    source = add_object_property(
        schema, "source", "Source of the data for this station definition"
    )
    add_property(
        source, "context", "string",
        "Name of government agency, company, etc. that supplied the data",
    )
    add_property(
        source, "name", "string",
        "Name of how the data was obtained from the context",
    )
    add_property(
        source, "stationId", "string",
        "How does this data source identify this particular station",
    )
    source["required"] = ["context", "stationId"]

    harmonics = add_object_property(
        schema, "harmonics", "Data required for reference tide and current stations"
    )
    add_number_property(harmonics, "confidence", "integer", CONFIDENCE_TEXT)
    add_table_enum_property(harmonics, "datum", catalog.datums, DATUM_TEXT)
    add_number_property(harmonics, "datumOffset", "number", DATUM_OFFSET_TEXT)
    add_number_property(harmonics, "zoneOffset", "integer", ZONE_OFFSET_TEXT)
    constituents = add_property(
        harmonics, "constituents", "array",
        "Harmonic constants that define this reference station",
    )
    item: JsonObject = {"type": "object"}
    add_table_enum_property(
        item, "name", catalog.constituents,
        "The harmonic constant being defined. See the XTide harmonics file documentation.",
    )
    add_number_property(
        item, "amp", "number", "The amplitutde in units defined in levelUnits"
    )
    add_number_property(
        item, "epoch", "number",
        "The epoch, sometimes defined as 'phase'. Should be relative to GMT "
        "unless zoneOffset is non-zero",
    )
    item["required"] = ["name", "amp", "epoch"]
    constituents["items"] = item

    offsets = add_object_property(
        schema, "offsets", "Data required for subordinate tide and current stations"
    )
    add_number_property(
        offsets, "ebbBegins", "integer",
        "For current stations only - the time corrector for the beginning of "
        "ebb tide for this station, a.k.a. 'minimum before ebb.'  Use offset "
        "hours * 100 + minutes. 2560 represents NULL/unknown",
    )
    add_number_property(
        offsets, "floodBegins", "integer",
        "For current stations only - the time corrector for the beginning of "
        "flood tide for this station, a.k.a. 'minimum before flood.'  Use "
        "offset hours * 100 + minutes. 2560 represents NULL/unknown",
    )
    add_number_property(
        offsets, "minLevelAdd", "number",
        "Offset to add to the low tide value from the reference station",
    )
    add_number_property(
        offsets, "maxLevelAdd", "number",
        "Offset to add to the high tide value from the reference station",
    )
    add_number_property(
        offsets, "minTimeAdd", "integer",
        "Offset to add to the time of low tide at the reference station (HHMM)",
    )
    add_number_property(
        offsets, "maxTimeAdd", "integer",
        "Offset to add to the time of high tide at the reference station (HHMM)",
    )
    add_number_property(
        offsets, "minLevelMultiply", "number",
        "Multiplier to scale the low tide level from the reference station",
    )
    add_number_property(
        offsets, "maxLevelMultiply", "number",
        "Multiplier to scale the high tide level from the reference station",
    )
    add_number_property(
        offsets, "referenceStationId", "integer",
        "The value of the 'id' field for the reference station this station "
        "is subordinate to.",
    )

    common = ["name", "type", "position", "timezone", "levelUnits"]
    schema["allOf"] = [
        _station_rule("tide", True, [*common, "harmonics", "source"]),
        _station_rule("tide", False, [*common, "offsets", "source"]),
        _station_rule("current", True, [*common, "harmonics", "flow", "source"]),
        _station_rule("current", False, [*common, "offsets", "flow", "source"]),
    ]
    schema["additionalProperties"] = False
    return schema