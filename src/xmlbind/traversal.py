# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import dataclasses
from collections.abc import Iterator
from contextlib import contextmanager

from .descriptors import DynamicType, Pointer, Slice, Struct, TypeDescriptor, TypeInspector, Unsupported
from .exceptions import DepthLimitError, InvalidTargetError
from .python import reprproxy
from .tag import FieldSpec
from .tree import LXMLTreeProvider, TreeProvider

__all__ = 'MAX_DEPTH', 'Traversal', 'type_repr'


# a few interpreter frames are used per level, this keeps well below the default recursion limit
MAX_DEPTH = 128

NO_FLAGS = FieldSpec()


def type_repr(descriptor: TypeDescriptor) -> str:
    match descriptor:
        case Unsupported(hint=hint):
            return str(reprproxy(hint))
        case Slice(element=element):
            return f'list[{type_repr(element)}]'
        case Pointer(target=target):
            return f'{type_repr(target)} | None'
        case DynamicType():
            return descriptor.name
        case _:
            return descriptor.type.__qualname__


class Traversal:
    """
    The state shared by the encoder and the decoder while walking a value.

    The state is reset at the start of every call, so nothing carries over
    from one call to the next. It holds the type inspector for the call and
    the path to the field being processed, which is used both to limit the
    nesting depth and to point to the offending field in error messages.
    """

    def __init__(self, provider: TreeProvider | None = None, *, max_depth: int = MAX_DEPTH) -> None:
        if max_depth <= 0:
            raise ValueError('max_depth must be a positive integer')
        self.provider = provider if provider is not None else LXMLTreeProvider()
        self.max_depth = max_depth
        self.inspector = TypeInspector()
        self.path: list[str] = []

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(provider={self.provider!r}, max_depth={self.max_depth!r})'

    @property
    def location(self) -> str:
        return ''.join(part if part.startswith('[') else f'.{part}' for part in self.path).lstrip('.')

    def reset(self) -> None:
        self.inspector = TypeInspector()
        self.path = []

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        if len(self.path) > self.max_depth:
            raise DepthLimitError(f'{self.location}: the object is nested deeper than {self.max_depth} levels')
        self.path.append(name)
        try:
            yield
        finally:
            self.path.pop()

    def struct_for(self, value: object) -> Struct:
        """The struct descriptor of a marshal/unmarshal argument, which must be a dataclass with fields"""
        data_type = value if isinstance(value, type) else type(value)
        if value is None or not dataclasses.is_dataclass(data_type):
            raise InvalidTargetError(f'expected a dataclass, got {reprproxy(data_type)}')
        struct = Struct(data_type)
        if all(struct_field.is_private for struct_field in self.inspector.fields(struct)):
            raise InvalidTargetError(f'{struct.name} does not have any fields')
        return struct
