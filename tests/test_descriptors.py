# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Optional, Self

from xmlbind import (
    Base64BinaryAdapter,
    BooleanAdapter,
    DatetimeAdapter,
    Dynamic,
    FieldSpec,
    Float32Adapter,
    Float64Adapter,
    Int8,
    Int8Adapter,
    Int64Adapter,
    StringAdapter,
    Tag,
    UInt16Adapter,
    XMLName,
)
from xmlbind.descriptors import DynamicType, Pointer, Scalar, Slice, Struct, TypeInspector, Unsupported
from xmlbind.python import reprproxy
from xmlbind.traversal import type_repr

type Percentage = Annotated[int, UInt16Adapter]


class Version:
    def __init__(self, text: str) -> None:
        self.text = text

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Version) and other.text == self.text

    def __hash__(self) -> int:
        return hash(self.text)

    @classmethod
    def xml_parse(cls, value: str) -> Self:
        return cls(value)

    def xml_build(self) -> str:
        return self.text


@dataclass
class Dimensions:
    width: int = 0
    height: int = 0


@dataclass
class Product:
    xml_name: Annotated[XMLName, Tag('product')] = XMLName()
    sku: Annotated[str, Tag('sku,attr')] = ''
    count: int = 0
    size: Dimensions = field(default_factory=Dimensions)
    labels: list[str] = field(default_factory=list)
    weight: float | None = None
    extra: Dynamic = field(default_factory=Dynamic)
    _cache: dict = field(default_factory=dict)


@dataclass
class Required:
    name: str
    count: int
    size: Dimensions
    tags: list[str]
    level: Optional[Int8]  # noqa: UP045
    flag: bool = True


class TestTypeInspector:

    def test_scalars(self) -> None:
        inspector = TypeInspector()
        assert inspector.describe(str) == Scalar(str, StringAdapter)
        assert inspector.describe(int) == Scalar(int, Int64Adapter)
        assert inspector.describe(bool) == Scalar(bool, BooleanAdapter)
        assert inspector.describe(datetime) == Scalar(datetime, DatetimeAdapter)
        assert inspector.describe(Int8) == Scalar(int, Int8Adapter)
        assert inspector.describe(Annotated[float, Float32Adapter]) == Scalar(float, Float32Adapter)
        assert inspector.describe(Annotated[bytes, Base64BinaryAdapter, Tag('data')]) == Scalar(bytes, Base64BinaryAdapter)
        assert inspector.describe(Percentage) == Scalar(int, UInt16Adapter)
        assert inspector.describe(Version) == Scalar(Version, Version)

    def test_composites(self) -> None:
        inspector = TypeInspector()
        assert inspector.describe(Dimensions) == Struct(Dimensions)
        assert inspector.describe(list[str]) == Slice(Scalar(str, StringAdapter))
        assert inspector.describe(list[Int8]) == Slice(Scalar(int, Int8Adapter))
        assert inspector.describe(list[Dimensions | None]) == Slice(Pointer(Struct(Dimensions)))
        assert inspector.describe(int | None) == Pointer(Scalar(int, Int64Adapter))
        assert inspector.describe(Optional[str]) == Pointer(Scalar(str, StringAdapter))  # noqa: UP045
        assert inspector.describe(Dynamic) == DynamicType()
        assert inspector.describe(Dynamic | None) == Pointer(DynamicType())

        # the adapter given to a list applies to its items
        assert inspector.describe(Annotated[list[int], Int8Adapter]) == Slice(Scalar(int, Int8Adapter))

    def test_unsupported(self) -> None:
        inspector = TypeInspector()
        for hint in (dict[str, int], set[int], int | str, tuple[int, int], object, XMLName):
            descriptor = inspector.describe(hint)
            assert isinstance(descriptor, Unsupported)
            assert descriptor.hint == hint

    def test_names(self) -> None:
        inspector = TypeInspector()
        assert inspector.describe(Dimensions).name == 'Dimensions'
        assert inspector.describe(list[Dimensions]).name == 'Dimensions'
        assert inspector.describe(Dimensions | None).name == 'Dimensions'
        assert inspector.describe(Int8).name == 'int'
        assert inspector.describe(Dynamic).name == 'Dynamic'
        assert inspector.describe(dict[str, int]).name == 'dict'

    def test_fields(self) -> None:
        inspector = TypeInspector()
        struct_fields = inspector.fields(Struct(Product))

        assert [struct_field.name for struct_field in struct_fields] == ['xml_name', 'sku', 'count', 'size', 'labels', 'weight', 'extra', '_cache']
        assert inspector.fields(Struct(Product)) is struct_fields

        xml_name, sku, count, size, labels, weight, extra, cache = struct_fields
        assert xml_name.is_root and xml_name.captures_name
        assert xml_name.spec == FieldSpec(tag_name='product')
        assert sku.spec == FieldSpec(tag_name='sku', attr=True)
        assert sku.type == Scalar(str, StringAdapter)
        assert count.spec is None
        assert size.type == Struct(Dimensions)
        assert labels.type == Slice(Scalar(str, StringAdapter))
        assert weight.type == Pointer(Scalar(float, Float64Adapter))
        assert extra.type == DynamicType()
        assert cache.is_private
        assert not any(struct_field.is_root for struct_field in struct_fields[1:])
        assert not any(struct_field.required for struct_field in struct_fields)

    def test_zero_values(self) -> None:
        inspector = TypeInspector()
        assert inspector.zero(inspector.describe(str)) == ''
        assert inspector.zero(inspector.describe(int)) == 0
        assert inspector.zero(inspector.describe(bool)) is False
        assert inspector.zero(inspector.describe(bytes)) == b''
        assert inspector.zero(inspector.describe(list[int])) == []
        assert inspector.zero(inspector.describe(int | None)) is None
        assert inspector.zero(inspector.describe(Dynamic)) == Dynamic()
        assert inspector.zero(inspector.describe(Dimensions)) == Dimensions()

        # required fields are given their zero value
        instance = inspector.instantiate(Struct(Required))
        assert instance == Required(name='', count=0, size=Dimensions(), tags=[], level=None, flag=True)

    def test_emptiness(self) -> None:
        inspector = TypeInspector()
        assert inspector.is_zero(inspector.describe(str), '')
        assert not inspector.is_zero(inspector.describe(str), 'x')
        assert inspector.is_zero(inspector.describe(int), 0)
        assert inspector.is_zero(inspector.describe(bool), False)  # noqa: FBT003
        assert inspector.is_zero(inspector.describe(float), 0.0)
        assert inspector.is_zero(inspector.describe(list[int]), [])
        assert not inspector.is_zero(inspector.describe(list[int]), [0])

        # a pointer is only empty when it does not point to anything
        assert inspector.is_zero(inspector.describe(int | None), None)
        assert not inspector.is_zero(inspector.describe(int | None), 0)

        assert inspector.is_zero(inspector.describe(Dynamic), Dynamic())
        assert not inspector.is_zero(inspector.describe(Dynamic), Dynamic(0))

        assert inspector.is_zero(inspector.describe(Dimensions), Dimensions())
        assert not inspector.is_zero(inspector.describe(Dimensions), Dimensions(width=1))
        assert inspector.is_zero(inspector.describe(Product), Product())
        assert not inspector.is_zero(inspector.describe(Product), Product(labels=['new']))


class TestTypeRepresentation:

    def test_reprproxy(self) -> None:
        assert repr(reprproxy(int)) == 'int'
        assert repr(reprproxy(Dimensions)) == 'Dimensions'
        assert repr(reprproxy(dict[str, list[int]])) == 'dict[str, list[int]]'
        assert repr(reprproxy(int | None)) == 'int | None'
        assert repr(reprproxy(Optional[str])) == 'str | None'  # noqa: UP045
        assert repr(reprproxy(Int8)) == 'int'
        assert repr(reprproxy(Percentage)) == 'int'
        assert str(reprproxy(...)) == '...'
        assert str(reprproxy(5)) == '5'

    def test_type_repr(self) -> None:
        inspector = TypeInspector()
        assert type_repr(inspector.describe(list[Int8 | None])) == 'list[int | None]'
        assert type_repr(inspector.describe(Dimensions)) == 'Dimensions'
        assert type_repr(inspector.describe(Dynamic)) == 'Dynamic'
        assert type_repr(inspector.describe(set[str])) == 'set[str]'
