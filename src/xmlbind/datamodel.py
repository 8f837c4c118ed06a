# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import math
import re
import struct
from binascii import a2b_base64 as base64decode
from binascii import a2b_hex as hexdecode
from binascii import b2a_base64 as base64encode
from binascii import b2a_hex as hexencode
from collections.abc import MutableMapping
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, ClassVar, NamedTuple, Protocol, Self, runtime_checkable

from .exceptions import NumericOverflowError, ParseFailureError

__all__ = (  # noqa: RUF022
    'XMLName',
    'Dynamic',

    'DataConverter',
    'DataAdapter',
    'AdapterRegistry',

    'StringAdapter',
    'BytesAdapter',
    'Base64BinaryAdapter',
    'HexBinaryAdapter',

    'BooleanAdapter',
    'DatetimeAdapter',

    'IntegerAdapter',
    'Int8Adapter',
    'Int16Adapter',
    'Int32Adapter',
    'Int64Adapter',
    'UInt8Adapter',
    'UInt16Adapter',
    'UInt32Adapter',
    'UInt64Adapter',

    'FloatAdapter',
    'Float32Adapter',
    'Float64Adapter',

    'Int8',
    'Int16',
    'Int32',
    'Int64',
    'UInt8',
    'UInt16',
    'UInt32',
    'UInt64',
    'Float32',
    'Float64',
    'Base64Bytes',
    'HexBytes',

    'parse_integer',
    'parse_float',
    'format_float',
)


class XMLName(NamedTuple):
    """The qualified name of an element, as captured by the xml_name field"""

    space: str = ''
    local: str = ''

    def __bool__(self) -> bool:
        return bool(self.space or self.local)


@dataclass(slots=True)
class Dynamic:
    """
    A field value whose type is only known at runtime.

    The type tag decides how the value converts to and from XML. It defaults
    to the type of the value, but it can be any type hint that is supported
    for fields (for example Int8 or a dataclass). A Dynamic without a type
    tag is left untouched when decoding.
    """

    value: object = None
    type: object = None

    def __post_init__(self) -> None:
        if self.type is None and self.value is not None:
            self.type = type(self.value)


@runtime_checkable
class DataConverter(Protocol):
    """A protocol that describes how a data type converts between itself and XML"""

    @classmethod
    def xml_parse(cls, value: str) -> Self:
        """Parse XML into the data type"""
        ...

    def xml_build(self: Self) -> str:
        """Build XML from the data type"""
        ...


@runtime_checkable
class DataAdapter[T](Protocol):
    """A protocol that describes an external adapter between a data type T and XML"""

    @staticmethod
    def xml_parse(value: str, /) -> T:
        """Parse XML into the data type"""
        ...

    @staticmethod
    def xml_build(value: T, /) -> str:
        """Build XML from the data type"""
        ...


class AdapterRegistry[T]:
    _adapters: ClassVar[MutableMapping[type, type[DataAdapter]]] = {}

    @classmethod
    def associate(cls, data_type: type[T], adapter: type[DataAdapter[T]]) -> None:
        if issubclass(data_type, DataConverter):
            raise TypeError('Adapters for types that already support the DataConverter protocol must be explicitly provided with Annotated metadata.')
        cls._adapters[data_type] = adapter

    @classmethod
    def get_adapter(cls, data_type: type[T]) -> type[DataAdapter[T]] | None:
        return cls._adapters.get(data_type, None)


class StringAdapter:
    zero: ClassVar[str] = ''

    @staticmethod
    def xml_parse(value: str) -> str:
        return value

    @staticmethod
    def xml_build(value: str) -> str:
        return value


class BytesAdapter:
    """Raw bytes, stored in the document as UTF-8 text"""

    zero: ClassVar[bytes] = b''

    @staticmethod
    def xml_parse(value: str) -> bytes:
        return value.encode('utf-8')

    @staticmethod
    def xml_build(value: bytes) -> str:
        return value.decode('utf-8')


class Base64BinaryAdapter:
    zero: ClassVar[bytes] = b''

    @staticmethod
    def xml_parse(value: str) -> bytes:
        return base64decode(value)

    @staticmethod
    def xml_build(value: bytes) -> str:
        return base64encode(value, newline=False).decode('ascii')


class HexBinaryAdapter:
    zero: ClassVar[bytes] = b''

    @staticmethod
    def xml_parse(value: str) -> bytes:
        return hexdecode(value)

    @staticmethod
    def xml_build(value: bytes) -> str:
        return hexencode(value).decode('ascii')


class BooleanAdapter:
    zero: ClassVar[bool] = False

    @staticmethod
    def xml_parse(value: str) -> bool:
        match value:
            case '1' | 't' | 'T' | 'true' | 'TRUE' | 'True':
                return True
            case '0' | 'f' | 'F' | 'false' | 'FALSE' | 'False':
                return False
            case _:
                raise ParseFailureError(f'invalid boolean value: {value!r}')

    @staticmethod
    def xml_build(value: bool) -> str:  # noqa: FBT001
        return 'true' if value else 'false'


class DatetimeAdapter:
    @staticmethod
    def xml_parse(value: str) -> datetime:
        return datetime.fromisoformat(value).astimezone(UTC)

    @staticmethod
    def xml_build(value: datetime) -> str:
        return value.astimezone(UTC).isoformat()


_integer_literal = re.compile(r"""
    (?P<sign>[+-]?)
    (?:
        0[xX](?P<hexadecimal>(?:_?[0-9a-fA-F])+)
      | 0[oO](?P<octal>(?:_?[0-7])+)
      | 0[bB](?P<binary>(?:_?[01])+)
      | 0(?P<legacy_octal>(?:_?[0-7])*)
      | (?P<decimal>[1-9](?:_?[0-9])*)
    )
""", re.VERBOSE)

_integer_bases = (('hexadecimal', 16), ('octal', 8), ('binary', 2), ('legacy_octal', 8), ('decimal', 10))


def parse_integer(value: str, *, signed: bool = True) -> int:
    """
    Parse an integer literal.

    Besides decimal numbers, this accepts the 0x, 0o and 0b prefixes, a
    leading 0 for octal numbers and underscores between digits. Unsigned
    literals must not have a sign.
    """
    match = _integer_literal.fullmatch(value)
    if match is None or (match['sign'] and not signed):
        raise ParseFailureError(f'invalid syntax for {"signed" if signed else "unsigned"} integer: {value!r}')
    digits, base = next((match[group], base) for group, base in _integer_bases if match[group] is not None)
    number = int(digits.replace('_', ''), base) if digits else 0
    return -number if match['sign'] == '-' else number


class IntegerAdapter:
    zero: ClassVar[int] = 0

    bits: ClassVar[int | None] = None
    unsigned: ClassVar[bool] = False

    def __init_subclass__(cls, *, bits: int, unsigned: bool = False, **kw: object) -> None:
        super().__init_subclass__(**kw)

        if bits <= 0:
            raise ValueError('bits must be a positive integer')

        name = f'{"unsigned" if unsigned else "signed"} {bits}-bit integer'
        offset: int = 0 if unsigned else 2 ** (bits - 1)
        lower_bound = 0 - offset
        upper_bound = 2**bits - 1 - offset

        def xml_parse(value: str) -> int:
            number = parse_integer(value, signed=not unsigned)
            if lower_bound <= number <= upper_bound:
                return number
            raise NumericOverflowError(f"value '{value}' is out of range for {name}")

        def xml_build(value: int) -> str:
            if lower_bound <= value <= upper_bound:
                return str(value)
            raise NumericOverflowError(f"value '{value}' is out of range for {name}")

        cls.bits = bits
        cls.unsigned = unsigned
        cls.xml_parse = staticmethod(xml_parse)  # type: ignore[method-assign]
        cls.xml_build = staticmethod(xml_build)  # type: ignore[method-assign]

    @staticmethod
    def xml_parse(value: str) -> int:
        return parse_integer(value)

    @staticmethod
    def xml_build(value: int) -> str:
        return str(value)


class Int8Adapter(IntegerAdapter, bits=8):
    pass


class Int16Adapter(IntegerAdapter, bits=16):
    pass


class Int32Adapter(IntegerAdapter, bits=32):
    pass


class Int64Adapter(IntegerAdapter, bits=64):
    pass


class UInt8Adapter(IntegerAdapter, bits=8, unsigned=True):
    pass


class UInt16Adapter(IntegerAdapter, bits=16, unsigned=True):
    pass


class UInt32Adapter(IntegerAdapter, bits=32, unsigned=True):
    pass


class UInt64Adapter(IntegerAdapter, bits=64, unsigned=True):
    pass


def _round_to_single(value: float) -> float:
    try:
        return struct.unpack('<f', struct.pack('<f', value))[0]
    except OverflowError:
        raise NumericOverflowError(f"value '{value}' is out of range for 32-bit float") from None


def parse_float(value: str, bits: int = 64) -> float:
    """Parse a floating point literal and round it to the given precision"""
    if not value or value != value.strip() or '_' in value:
        raise ParseFailureError(f'invalid syntax for {bits}-bit float: {value!r}')
    try:
        number = float(value)
    except ValueError:
        if value.lstrip('+-')[:2] not in {'0x', '0X'}:
            raise ParseFailureError(f'invalid syntax for {bits}-bit float: {value!r}') from None
        try:
            number = float.fromhex(value)
        except (ValueError, OverflowError):
            raise ParseFailureError(f'invalid syntax for {bits}-bit float: {value!r}') from None
    if math.isinf(number) and value.lstrip('+-').lower() not in {'inf', 'infinity'}:
        raise NumericOverflowError(f"value '{value}' is out of range for {bits}-bit float")
    return _round_to_single(number) if bits == 32 else number


def format_float(value: float, bits: int = 64) -> str:
    """Format a float using the fewest digits that read back as the same value at the given precision"""
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return '+Inf' if value > 0 else '-Inf'
    if bits == 32:
        value = _round_to_single(value)
        for precision in range(1, 10):
            text = f'{value:.{precision}g}'
            if _round_to_single(float(text)) == value:
                break
    else:
        text = repr(float(value))
    # positional notation, without trailing zeros
    return format(Decimal(text).normalize(), 'f')


class FloatAdapter:
    zero: ClassVar[float] = 0.0

    bits: ClassVar[int] = 64

    def __init_subclass__(cls, *, bits: int, **kw: object) -> None:
        super().__init_subclass__(**kw)

        if bits not in {32, 64}:
            raise ValueError('bits must be either 32 or 64')

        def xml_parse(value: str) -> float:
            return parse_float(value, bits)

        def xml_build(value: float) -> str:
            return format_float(value, bits)

        cls.bits = bits
        cls.xml_parse = staticmethod(xml_parse)  # type: ignore[method-assign]
        cls.xml_build = staticmethod(xml_build)  # type: ignore[method-assign]

    @staticmethod
    def xml_parse(value: str) -> float:
        return parse_float(value)

    @staticmethod
    def xml_build(value: float) -> str:
        return format_float(value)


class Float32Adapter(FloatAdapter, bits=32):
    pass


class Float64Adapter(FloatAdapter, bits=64):
    pass


AdapterRegistry.associate(str, StringAdapter)
AdapterRegistry.associate(bytes, BytesAdapter)
AdapterRegistry.associate(bool, BooleanAdapter)
AdapterRegistry.associate(int, Int64Adapter)
AdapterRegistry.associate(float, Float64Adapter)
AdapterRegistry.associate(datetime, DatetimeAdapter)


# Sized numbers and alternative encodings for use in field annotations

Int8 = Annotated[int, Int8Adapter]
Int16 = Annotated[int, Int16Adapter]
Int32 = Annotated[int, Int32Adapter]
Int64 = Annotated[int, Int64Adapter]
UInt8 = Annotated[int, UInt8Adapter]
UInt16 = Annotated[int, UInt16Adapter]
UInt32 = Annotated[int, UInt32Adapter]
UInt64 = Annotated[int, UInt64Adapter]

Float32 = Annotated[float, Float32Adapter]
Float64 = Annotated[float, Float64Adapter]

Base64Bytes = Annotated[bytes, Base64BinaryAdapter]
HexBytes = Annotated[bytes, HexBinaryAdapter]
