# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from types import GenericAlias, NoneType, UnionType
from typing import Annotated, TypeAliasType, Union, get_args, get_origin

__all__ = 'reprproxy',  # noqa: COM818


class reprproxy:  # noqa: N801
    """
    A proxy to provide better representation for type hints.

    The representation will mimic their appearance in the code,
    which makes error messages about field types more readable.

    This applies to type aliases, generic aliases, union types
    (including typing.Optional), Annotated hints (shown without
    their metadata) and classes. Everything else gets their normal
    representation.
    """

    def __init__(self, value: object) -> None:
        self.value = value

    def __repr__(self) -> str:
        match self.value:
            case TypeAliasType() as value:
                return reprproxy(value.__value__).__repr__()
            case value if get_origin(value) is Annotated:
                return reprproxy(get_args(value)[0]).__repr__()
            case value if isinstance(value, UnionType) or get_origin(value) is Union:
                return ' | '.join('None' if _type is NoneType else reprproxy(_type).__repr__() for _type in get_args(value))
            case GenericAlias() as value:
                return f'{value.__origin__.__qualname__}[{', '.join(reprproxy(_value).__repr__() for _value in value.__args__)}]'
            case type() as value:
                return value.__qualname__
            case value:
                return '...' if value is Ellipsis else repr(value)

    __str__ = __repr__
