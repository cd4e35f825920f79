"""Sample schema and data for a small weather-report protocol.

:func:`weather_report_schema` returns a serialized
``google.protobuf.FileDescriptorSet`` describing the protocol.
:func:`read_weather_data` returns a serialized ``WeatherReport`` message
encoded with that schema.
"""

from __future__ import annotations

import struct
from typing import Iterable, NamedTuple, Optional

_VARINT = 0
_LEN = 2
_FIXED32 = 5

# FieldDescriptorProto.Label
_LABEL_OPTIONAL = 1
_LABEL_REPEATED = 3

# FieldDescriptorProto.Type
_TYPE_FLOAT = 2
_TYPE_STRING = 9
_TYPE_MESSAGE = 11
_TYPE_ENUM = 14


def _varint(value: int) -> bytes:
    if value < 0:
        value &= (1 << 64) - 1
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _key(number: int, wire_type: int) -> bytes:
    return _varint(number << 3 | wire_type)


def _uint(number: int, value: int) -> bytes:
    return _key(number, _VARINT) + _varint(value)


def _bytes(number: int, payload: bytes) -> bytes:
    return _key(number, _LEN) + _varint(len(payload)) + payload


def _string(number: int, text: str) -> bytes:
    return _bytes(number, text.encode("utf-8"))


def _float32(number: int, value: float) -> bytes:
    return _key(number, _FIXED32) + struct.pack("<f", value)


def _message(number: int, parts: Iterable[bytes]) -> bytes:
    return _bytes(number, b"".join(parts))


class _Field(NamedTuple):
    name: str
    number: int
    label: int
    type: int
    json_name: str
    type_name: Optional[str] = None


_STATION_REPORT_FIELDS = (
    _Field("station", 1, _LABEL_OPTIONAL, _TYPE_STRING, "station"),
    _Field("frequency", 2, _LABEL_OPTIONAL, _TYPE_FLOAT, "frequency"),
    _Field("temperature", 3, _LABEL_OPTIONAL, _TYPE_FLOAT, "temperature"),
    _Field("pressure", 4, _LABEL_OPTIONAL, _TYPE_FLOAT, "pressure"),
    _Field("wind_speed", 5, _LABEL_OPTIONAL, _TYPE_FLOAT, "windSpeed"),
    _Field(
        "conditions", 6, _LABEL_OPTIONAL, _TYPE_ENUM, "conditions",
        ".example.weather.v1.Condition",
    ),
)

_WEATHER_REPORT_FIELDS = (
    _Field("region", 1, _LABEL_OPTIONAL, _TYPE_STRING, "region"),
    _Field(
        "weather_stations", 2, _LABEL_REPEATED, _TYPE_MESSAGE, "weatherStations",
        ".example.weather.v1.StationReport",
    ),
)

_CONDITIONS = (
    ("CONDITION_UNSPECIFIED", 0),
    ("CONDITION_SUNNY", 1),
    ("CONDITION_RAINY", 2),
    ("CONDITION_OVERCAST", 3),
)


class _Station(NamedTuple):
    station: str
    frequency: float
    temperature: float
    pressure: float
    wind_speed: float
    conditions: int


_STATIONS = (
    _Station("KAD93", 162.525, 11.3, 30.08, 2.3, 3),
    _Station("KHB60", 162.55, 13.7, 28.09, 1.9, 3),
)


def _field_descriptor(field: _Field) -> bytes:
    parts = [
        _string(1, field.name),
        _uint(3, field.number),
        _uint(4, field.label),
        _uint(5, field.type),
    ]
    if field.type_name is not None:
        parts.append(_string(6, field.type_name))
    parts.append(_string(10, field.json_name))
    return _message(2, parts)


def _message_descriptor(name: str, fields: Iterable[_Field]) -> bytes:
    return _message(4, [_string(1, name), *(_field_descriptor(f) for f in fields)])


def _enum_descriptor(name: str, values: Iterable[tuple]) -> bytes:
    return _message(
        5,
        [
            _string(1, name),
            *(_message(2, [_string(1, value), _uint(2, number)]) for value, number in values),
        ],
    )


def weather_report_schema() -> bytes:
    """Return a serialized FileDescriptorSet for the weather-report protocol."""
    file = _message(
        1,
        [
            _string(1, "internal/proto/example/weather/v1/weather.proto"),
            _string(2, "example.weather.v1"),
            _message_descriptor("StationReport", _STATION_REPORT_FIELDS),
            _message_descriptor("WeatherReport", _WEATHER_REPORT_FIELDS),
            _enum_descriptor("Condition", _CONDITIONS),
            _string(12, "proto3"),
        ],
    )
    return file


def _station(report: _Station) -> bytes:
    return _message(
        2,
        [
            _string(1, report.station),
            _float32(2, report.frequency),
            _float32(3, report.temperature),
            _float32(4, report.pressure),
            _float32(5, report.wind_speed),
            _uint(6, report.conditions),
        ],
    )


def read_weather_data() -> bytes:
    """Return a serialized WeatherReport using :func:`weather_report_schema`."""
    return _string(1, "Seattle") + b"".join(_station(s) for s in _STATIONS)