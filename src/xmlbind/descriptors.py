# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import dataclasses
from dataclasses import dataclass
from types import NoneType, UnionType
from typing import Annotated, ClassVar, TypeAliasType, Union, get_args, get_origin, get_type_hints

from .datamodel import AdapterRegistry, DataAdapter, DataConverter, Dynamic, XMLName
from .python import reprproxy
from .tag import FieldSpec, Tag, parse_tag

__all__ = (  # noqa: RUF022
    'TypeDescriptor',
    'Scalar',
    'Struct',
    'Slice',
    'Pointer',
    'DynamicType',
    'Unsupported',
    'StructField',
    'TypeInspector',
    'ROOT_FIELD',
)


ROOT_FIELD = 'xml_name'


@dataclass(frozen=True, slots=True)
class Scalar:
    type: type
    adapter: type[DataAdapter]

    @property
    def name(self) -> str:
        return self.type.__name__

    @property
    def zero(self) -> object:
        return getattr(self.adapter, 'zero', None)


@dataclass(frozen=True, slots=True)
class Struct:
    type: type

    @property
    def name(self) -> str:
        return self.type.__name__


@dataclass(frozen=True, slots=True)
class Slice:
    element: 'TypeDescriptor'

    @property
    def name(self) -> str:
        return self.element.name


@dataclass(frozen=True, slots=True)
class Pointer:
    target: 'TypeDescriptor'

    @property
    def name(self) -> str:
        return self.target.name


@dataclass(frozen=True, slots=True)
class DynamicType:
    name: ClassVar[str] = Dynamic.__name__


@dataclass(frozen=True, slots=True)
class Unsupported:
    hint: object

    @property
    def name(self) -> str:
        return getattr(self.hint, '__name__', str(reprproxy(self.hint)))


type TypeDescriptor = Scalar | Struct | Slice | Pointer | DynamicType | Unsupported


@dataclass(frozen=True, slots=True)
class StructField:
    name: str
    type: TypeDescriptor
    spec: FieldSpec | None = None
    hint: object = None
    required: bool = False

    @property
    def is_root(self) -> bool:
        return self.name == ROOT_FIELD

    @property
    def is_private(self) -> bool:
        return self.name.startswith('_')

    @property
    def captures_name(self) -> bool:
        return self.is_root and self.hint is XMLName


def _is_adapter(item: object) -> bool:
    return isinstance(item, type) and issubclass(item, DataAdapter)


class TypeInspector:
    """
    Derive the traversal shape of types from their type hints.

    Struct fields (with their parsed tags) are computed once per dataclass
    and kept for as long as the inspector lives. The encoder and decoder
    create one inspector per call.
    """

    def __init__(self) -> None:
        self._fields: dict[type, list[StructField]] = {}

    def describe(self, hint: object) -> TypeDescriptor:
        return self._describe(hint, None)

    def _describe(self, hint: object, adapter: type[DataAdapter] | None) -> TypeDescriptor:
        if get_origin(hint) is Annotated:
            hint, *metadata = get_args(hint)
            adapter = next((item for item in reversed(metadata) if _is_adapter(item)), adapter)
        if isinstance(hint, TypeAliasType):
            return self._describe(hint.__value__, adapter)
        origin = get_origin(hint)
        if origin is list:
            (element_hint,) = get_args(hint) or (object,)
            return Slice(self._describe(element_hint, adapter))
        if isinstance(hint, UnionType) or origin is Union:
            arguments = get_args(hint)
            targets = [argument for argument in arguments if argument is not NoneType]
            if len(arguments) == 2 and len(targets) == 1:
                return Pointer(self._describe(targets[0], adapter))
            return Unsupported(hint)
        if hint is Dynamic:
            return DynamicType()
        if isinstance(hint, type) and origin is None:
            if adapter is None:
                if issubclass(hint, DataConverter):
                    adapter = hint  # A type that implements the DataConverter protocol is its own DataAdapter
                else:
                    adapter = AdapterRegistry.get_adapter(hint)
            if adapter is not None:
                return Scalar(hint, adapter)
            if dataclasses.is_dataclass(hint):
                return Struct(hint)
        return Unsupported(hint)

    def fields(self, struct: Struct) -> list[StructField]:
        try:
            return self._fields[struct.type]
        except KeyError:
            pass
        hints = get_type_hints(struct.type, include_extras=True)
        struct_fields = []
        for dataclass_field in dataclasses.fields(struct.type):
            hint = hints.get(dataclass_field.name, dataclass_field.type)
            tag = None
            if get_origin(hint) is Annotated:
                tag = next((item for item in reversed(get_args(hint)[1:]) if isinstance(item, Tag)), None)
            required = dataclass_field.init and dataclass_field.default is dataclasses.MISSING and dataclass_field.default_factory is dataclasses.MISSING
            # the root name check needs the bare hint, without the tag
            bare_hint = get_args(hint)[0] if get_origin(hint) is Annotated else hint
            struct_fields.append(StructField(dataclass_field.name, self.describe(hint), parse_tag(tag) if tag else None, bare_hint, required))
        return self._fields.setdefault(struct.type, struct_fields)

    def zero(self, descriptor: TypeDescriptor) -> object:
        """The value a field of the given type has before anything is assigned to it"""
        match descriptor:
            case Scalar():
                return descriptor.zero
            case Struct():
                return self.instantiate(descriptor)
            case Slice():
                return []
            case DynamicType():
                return Dynamic()
            case _:
                return None

    def instantiate(self, struct: Struct) -> object:
        arguments = {struct_field.name: self.zero(struct_field.type) for struct_field in self.fields(struct) if struct_field.required}
        return struct.type(**arguments)

    def is_zero(self, descriptor: TypeDescriptor, value: object) -> bool:
        match descriptor:
            case _ if value is None:
                return True
            case Scalar():
                return value == descriptor.zero
            case Pointer():
                return False
            case DynamicType():
                return isinstance(value, Dynamic) and value.value is None
            case Struct():
                return all(self.is_zero(struct_field.type, getattr(value, struct_field.name, None)) for struct_field in self.fields(descriptor))
            case _:
                return not value
