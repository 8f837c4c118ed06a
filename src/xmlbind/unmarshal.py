# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import dataclasses
import logging
from typing import overload

from .datamodel import Dynamic, XMLName
from .descriptors import DynamicType, Pointer, Scalar, Slice, Struct, StructField, TypeDescriptor
from .exceptions import InvalidTargetError, MissingAttributeError, NumericOverflowError, ParseFailureError, UnsupportedTypeError
from .naming import ResolvedName, resolve_name
from .traversal import MAX_DEPTH, NO_FLAGS, Traversal, type_repr
from .tree import TreeProvider

__all__ = 'Decoder', 'unmarshal'


log = logging.getLogger(__name__)


def _is_element_field(struct_field: StructField) -> bool:
    spec = struct_field.spec or NO_FLAGS
    return not (struct_field.is_root or spec.attr or spec.chardata or spec.cdata or spec.innerxml or spec.comment or spec.any)


class Decoder(Traversal):
    """
    Populate dataclass instances from XML documents.

    The fields are matched against the root element using the same rules the
    Encoder uses to produce them. Elements and attributes that do not match
    any field are ignored, while fields that do not match anything in the
    document keep their current value (with the exception of attribute
    fields, which are mandatory unless they are optional or tagged with
    omitempty).

    When several elements match a singular field, the last one wins for
    scalar values. Struct values are instead merged: every match is decoded
    into the same instance, so lists inside it accumulate the items from all
    the matches and fields only present in an earlier match keep their value.

    Frozen dataclasses cannot be populated and raise InvalidTargetError as
    soon as a value has to be stored in one.

    Decoding stops at the first error, which is raised with the path to the
    offending field. The target may have been partially populated by then.
    """

    @overload
    def decode[T](self, data: str | bytes, target: type[T]) -> T: ...

    @overload
    def decode[T](self, data: str | bytes, target: T) -> T: ...

    def decode(self, data: str | bytes, target: object) -> object:
        self.reset()
        struct = self.struct_for(target)
        instance = self.inspector.instantiate(struct) if isinstance(target, type) else target
        log.debug('Decoding %s', struct.name)
        with self.provider.parsed(data) as root, self.step(struct.name):
            self._fill(root, struct, instance)
        return instance

    def _fill(self, node: object, struct: Struct, instance: object) -> None:
        struct_fields = [struct_field for struct_field in self.inspector.fields(struct) if not struct_field.is_private]
        element_names = [resolve_name(struct_field) for struct_field in struct_fields if _is_element_field(struct_field)]
        for struct_field in struct_fields:
            with self.step(struct_field.name):
                self._decode_field(node, struct_field, instance, element_names)

    def _assign(self, instance: object, name: str, value: object) -> None:
        try:
            setattr(instance, name, value)
        except dataclasses.FrozenInstanceError:
            raise InvalidTargetError(f'{self.location}: instances of the frozen dataclass {type(instance).__qualname__} cannot be populated') from None

    def _matches(self, name: ResolvedName, node: object) -> bool:
        return self.provider.local_name(node) == name.local and (not name.namespace or self.provider.namespace(node) == name.namespace)

    def _decode_field(self, node: object, struct_field: StructField, instance: object, element_names: list[ResolvedName]) -> None:
        spec = struct_field.spec or NO_FLAGS
        descriptor = struct_field.type
        current = getattr(instance, struct_field.name, None)

        if struct_field.is_root:
            if struct_field.captures_name:
                self._assign(instance, struct_field.name, XMLName(self.provider.namespace(node), self.provider.local_name(node)))
            return
        if spec.innerxml:
            self._assign(instance, struct_field.name, self._raw_markup(descriptor, self.provider.markup(node)))
            return

        name = resolve_name(struct_field)

        if spec.attr:
            text = self.provider.attribute(node, name.local)
            if text is None:
                if spec.omitempty or isinstance(descriptor, Pointer):
                    log.debug('Attribute %r for %s is not present', name.local, self.location)
                    return
                raise MissingAttributeError(f'{self.location}: the {self.provider.local_name(node)!r} element does not have the {name.local!r} attribute')
            self._assign(instance, struct_field.name, self._parse(descriptor, text, current))
            return
        if spec.chardata or spec.cdata:
            self._assign(instance, struct_field.name, self._decode_value(descriptor, current, node))
            return
        if spec.comment:
            self._assign(instance, struct_field.name, self._parse(descriptor, ''.join(self.provider.comments(node)), current))
            return

        children = self.provider.children(node)
        if spec.any:
            matches = [child for child in children if not any(self._matches(element_name, child) for element_name in element_names)]
        else:
            matches = [child for child in children if self._matches(name, child)]

        if isinstance(descriptor, Slice):
            items = list(current) if current is not None else []
            for index, child in enumerate(matches, start=len(items)):
                with self.step(f'[{index}]'):
                    items.append(self._decode_value(descriptor.element, self.inspector.zero(descriptor.element), child))
            self._assign(instance, struct_field.name, items)
        else:
            for child in matches:
                # scalars are replaced by a later match, structs are decoded again on top of the earlier result
                current = self._decode_value(descriptor, current, child)
                self._assign(instance, struct_field.name, current)

    def _decode_value(self, descriptor: TypeDescriptor, current: object, node: object) -> object:
        match descriptor:
            case Pointer(target=target):
                return self._decode_value(target, current if current is not None else self.inspector.zero(target), node)
            case DynamicType():
                if not isinstance(current, Dynamic) or current.type is None:
                    return current
                concrete = self.inspector.describe(current.type)
                return Dynamic(self._decode_value(concrete, self.inspector.zero(concrete), node), current.type)
            case Struct():
                instance = current if current is not None else self.inspector.instantiate(descriptor)
                self._fill(node, descriptor, instance)
                return instance
            case _:
                return self._parse(descriptor, self.provider.content(node), current)

    def _parse(self, descriptor: TypeDescriptor, text: str, current: object) -> object:
        match descriptor:
            case Pointer(target=target):
                return self._parse(target, text, None)
            case DynamicType():
                if not isinstance(current, Dynamic) or current.type is None:
                    return current
                return Dynamic(self._parse(self.inspector.describe(current.type), text, None), current.type)
            case Scalar(adapter=adapter):
                try:
                    return adapter.xml_parse(text)
                except (ParseFailureError, NumericOverflowError) as exc:
                    raise type(exc)(f'invalid value for {self.location}: {exc!s}') from exc
                except ValueError as exc:
                    raise ParseFailureError(f'invalid value for {self.location}: {exc!s}') from exc
            case _:
                raise UnsupportedTypeError(f'{self.location}: values of type {type_repr(descriptor)} cannot be parsed from XML text')

    def _raw_markup(self, descriptor: TypeDescriptor, markup: str) -> str | bytes:
        if isinstance(descriptor, Pointer):
            descriptor = descriptor.target
        match descriptor:
            case Scalar(type=data_type) if data_type is str:
                return markup
            case Scalar(type=data_type) if data_type is bytes:
                return markup.encode('utf-8')
            case _:
                raise UnsupportedTypeError(f'{self.location}: raw markup can only be stored in str or bytes fields, not {type_repr(descriptor)}')


@overload
def unmarshal[T](data: str | bytes, target: type[T], *, provider: TreeProvider | None = None, max_depth: int = MAX_DEPTH) -> T: ...


@overload
def unmarshal[T](data: str | bytes, target: T, *, provider: TreeProvider | None = None, max_depth: int = MAX_DEPTH) -> T: ...


def unmarshal(data: str | bytes, target: object, *, provider: TreeProvider | None = None, max_depth: int = MAX_DEPTH) -> object:
    """
    Decode an XML document into a dataclass.

    The target is either a dataclass instance, which is populated in place,
    or a dataclass type, in which case a new instance is created. In both
    cases the populated instance is returned.
    """
    return Decoder(provider, max_depth=max_depth).decode(data, target)
