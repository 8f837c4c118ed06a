# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from .datamodel import Dynamic, XMLName
from .descriptors import ROOT_FIELD, DynamicType, Pointer, Scalar, Slice, Struct, StructField, TypeDescriptor
from .exceptions import CyclicValueError, InvalidTargetError, InvalidValueError, MissingRootNameError, NumericOverflowError, ParseFailureError, UnsupportedTypeError
from .naming import ResolvedName, resolve_name
from .tag import split_prefix
from .traversal import MAX_DEPTH, NO_FLAGS, Traversal, type_repr
from .tree import TreeProvider

__all__ = 'Encoder', 'marshal'


log = logging.getLogger(__name__)


class Encoder(Traversal):
    """
    Build XML documents from dataclass instances.

    The dataclass must have an ``xml_name`` field which provides the name of
    the document's root element, either through its tag or through its value.
    The other fields are converted in the order they are defined, according
    to their tags. A document is only produced when all the fields could be
    converted, the first error aborts the whole operation.
    """

    def __init__(self, provider: TreeProvider | None = None, *, max_depth: int = MAX_DEPTH) -> None:
        super().__init__(provider, max_depth=max_depth)
        self._active: set[int] = set()

    def reset(self) -> None:
        super().reset()
        self._active = set()

    def encode(self, value: object) -> str:
        self.reset()
        if isinstance(value, type):
            raise InvalidTargetError(f'expected a dataclass instance, got the {value.__qualname__} class')
        struct = self.struct_for(value)
        log.debug('Encoding %s', struct.name)

        root_field = next((struct_field for struct_field in self.inspector.fields(struct) if struct_field.is_root), None)
        if root_field is None:
            raise MissingRootNameError(f'{struct.name} does not define the {ROOT_FIELD!r} field which provides the root element name')
        name = self._root_name(struct, root_field, getattr(value, ROOT_FIELD))

        root = self.provider.create_element(name.local, name.namespace or None, name.prefix)
        document = self.provider.create_document(root)
        try:
            with self.step(struct.name):
                self._fill(root, struct, value)
            normalized = self.provider.normalize_namespaces(document)
            try:
                return self.provider.serialize(normalized)
            finally:
                self.provider.release(normalized)
        finally:
            self.provider.release(document)

    @staticmethod
    def _root_name(struct: Struct, root_field: StructField, value: object) -> ResolvedName:
        if root_field.spec is not None and root_field.spec.tag_name:
            return resolve_name(root_field)
        # without a name in the tag, use the name the object was decoded from
        if isinstance(value, XMLName) and value.local:
            prefix, local = split_prefix(value.local)
            return ResolvedName(value.space, prefix, local)
        raise MissingRootNameError(f'the {ROOT_FIELD!r} field of {struct.name} does not provide a name for the root element')

    @contextmanager
    def _visiting(self, value: object) -> Iterator[None]:
        key = id(value)
        if key in self._active:
            raise CyclicValueError(f'{self.location}: {type(value).__qualname__} object contains a reference to itself')
        self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)

    def _fill(self, node: object, struct: Struct, value: object) -> None:
        with self._visiting(value):
            for struct_field in self.inspector.fields(struct):
                if struct_field.is_root or struct_field.is_private:
                    continue
                with self.step(struct_field.name):
                    self._encode_field(node, struct_field, getattr(value, struct_field.name))

    def _encode_field(self, node: object, struct_field: StructField, value: object) -> None:
        spec = struct_field.spec or NO_FLAGS
        descriptor = struct_field.type

        if spec.omitempty and self.inspector.is_zero(descriptor, value):
            log.debug('Omitting empty field %s', self.location)
            return
        if value is None or spec.innerxml:
            return
        if isinstance(value, Dynamic) and value.value is None and (spec.attr or spec.comment or spec.cdata):
            return
        if spec.comment:
            with self._converting():
                self.provider.add_comment(node, self._stringify(descriptor, value))
            return
        if spec.chardata:
            self._encode_value(descriptor, value, node)
            return
        if spec.cdata:
            with self._converting():
                self.provider.set_content(node, self._stringify(descriptor, value), cdata=True)
            return

        name = resolve_name(struct_field)

        if spec.attr:
            with self._converting():
                self.provider.set_attribute(node, name.local, self._stringify(descriptor, value))
        elif isinstance(descriptor, Slice):
            for index, item in enumerate(value):  # type: ignore[call-overload]
                if item is not None:
                    with self.step(f'[{index}]'):
                        self._encode_element(node, name, descriptor.element, item, use_own_name=spec.any)
        else:
            self._encode_element(node, name, descriptor, value, use_own_name=spec.any)

    def _encode_element(self, parent: object, name: ResolvedName, descriptor: TypeDescriptor, value: object, *, use_own_name: bool = False) -> None:
        if use_own_name:
            own_name = getattr(value, ROOT_FIELD, None)
            if isinstance(own_name, XMLName) and own_name.local:
                prefix, local = split_prefix(own_name.local)
                name = ResolvedName(own_name.space, prefix, local)
        with self._converting():
            child = self.provider.create_element(name.local, name.namespace or None, name.prefix)
        self._encode_value(descriptor, value, child)
        self.provider.add_child(parent, child)

    def _encode_value(self, descriptor: TypeDescriptor, value: object, node: object) -> None:
        match descriptor:
            case Pointer(target=target):
                if value is not None:
                    self._encode_value(target, value, node)
            case DynamicType():
                dynamic = value if isinstance(value, Dynamic) else Dynamic(value)
                if dynamic.value is not None:
                    self._encode_value(self.inspector.describe(dynamic.type), dynamic.value, node)
            case Struct():
                self._fill(node, descriptor, value)
            case _:
                with self._converting():
                    self.provider.set_content(node, self._stringify(descriptor, value))

    @contextmanager
    def _converting(self) -> Iterator[None]:
        """Attach the field path to the errors raised while turning a value into XML"""
        try:
            yield
        except (NumericOverflowError, ParseFailureError) as exc:
            raise type(exc)(f'invalid value for {self.location}: {exc!s}') from exc
        except ValueError as exc:
            # text that lxml refuses to put in a document, or bytes that are not valid UTF-8
            raise InvalidValueError(f'invalid value for {self.location}: {exc!s}') from exc

    def _stringify(self, descriptor: TypeDescriptor, value: object) -> str:
        match descriptor:
            case Pointer(target=target):
                return self._stringify(target, value)
            case DynamicType():
                dynamic = value if isinstance(value, Dynamic) else Dynamic(value)
                return self._stringify(self.inspector.describe(dynamic.type), dynamic.value)
            case Scalar(adapter=adapter):
                return adapter.xml_build(value)
            case _:
                raise UnsupportedTypeError(f'{self.location}: values of type {type_repr(descriptor)} cannot be represented as XML text')


def marshal(value: object, *, provider: TreeProvider | None = None, max_depth: int = MAX_DEPTH) -> str:
    """Encode a dataclass instance as an XML document"""
    return Encoder(provider, max_depth=max_depth).encode(value)
