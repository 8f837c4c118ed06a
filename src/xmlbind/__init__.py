# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Declarative conversion between dataclasses and XML documents.

Fields are mapped to elements, attributes, text or comments using Tag
annotations:

  @dataclass
  class Item:
      xml_name: Annotated[XMLName, Tag('urn:example:shop item')] = XMLName()
      id: Annotated[UInt32, Tag('id,attr')] = 0
      name: str = ''
      tags: Annotated[list[str], Tag('tag,omitempty')] = field(default_factory=list)

  document = marshal(Item(id=7, name='pencil'))
  item = unmarshal(document, Item)
"""

from .__info__ import __version__
from .datamodel import (
    AdapterRegistry,
    Base64BinaryAdapter,
    Base64Bytes,
    BooleanAdapter,
    BytesAdapter,
    DataAdapter,
    DataConverter,
    DatetimeAdapter,
    Dynamic,
    Float32,
    Float32Adapter,
    Float64,
    Float64Adapter,
    FloatAdapter,
    HexBinaryAdapter,
    HexBytes,
    Int8,
    Int8Adapter,
    Int16,
    Int16Adapter,
    Int32,
    Int32Adapter,
    Int64,
    Int64Adapter,
    IntegerAdapter,
    StringAdapter,
    UInt8,
    UInt8Adapter,
    UInt16,
    UInt16Adapter,
    UInt32,
    UInt32Adapter,
    UInt64,
    UInt64Adapter,
    XMLName,
)
from .exceptions import (
    CyclicValueError,
    DepthLimitError,
    InvalidTargetError,
    InvalidValueError,
    MalformedDocumentError,
    MissingAttributeError,
    MissingRootNameError,
    NumericOverflowError,
    ParseFailureError,
    UnsupportedTypeError,
    XMLBindError,
)
from .marshal import Encoder, marshal
from .tag import FieldSpec, Tag, parse_tag
from .tree import DEFAULT_PARSE_OPTIONS, NSCLEAN_PARSE_OPTIONS, LXMLTreeProvider, ParseOptions, TreeProvider
from .unmarshal import Decoder, unmarshal

__all__ = (  # noqa: RUF022
    '__version__',

    'marshal',
    'unmarshal',
    'Encoder',
    'Decoder',

    'Tag',
    'FieldSpec',
    'parse_tag',

    'XMLName',
    'Dynamic',

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

    'TreeProvider',
    'LXMLTreeProvider',
    'ParseOptions',
    'DEFAULT_PARSE_OPTIONS',
    'NSCLEAN_PARSE_OPTIONS',

    'XMLBindError',
    'InvalidTargetError',
    'MissingRootNameError',
    'UnsupportedTypeError',
    'ParseFailureError',
    'NumericOverflowError',
    'MissingAttributeError',
    'MalformedDocumentError',
    'InvalidValueError',
    'CyclicValueError',
    'DepthLimitError',
)
