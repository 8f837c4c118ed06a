# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import dataclass, fields

__all__ = 'Tag', 'FieldSpec', 'parse_tag', 'split_prefix', 'strip_prefix'


class Tag(str):
    """
    The XML annotation of a dataclass field.

    It is used as metadata in the field's annotation:

      id: Annotated[int, Tag('id,attr')]
      items: Annotated[list[Item], Tag('urn:example:inventory item,omitempty')]

    The value is a comma separated list. The first entry is the element or
    attribute name, optionally preceded by a namespace URI and a space. The
    other entries are flags: omitempty, attr, chardata, cdata, innerxml,
    comment and any.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({super().__repr__()})'

    @property
    def spec(self) -> 'FieldSpec | None':
        return parse_tag(self)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    namespace: str = ''
    tag_name: str = ''

    attr: bool = False
    chardata: bool = False
    innerxml: bool = False
    cdata: bool = False
    comment: bool = False
    any: bool = False
    omitempty: bool = False

    def __repr__(self) -> str:
        flags = [spec_field.name for spec_field in fields(self) if spec_field.type is bool and getattr(self, spec_field.name)]
        return f'{self.__class__.__qualname__}(namespace={self.namespace!r}, tag_name={self.tag_name!r}, flags={flags!r})'


_flags = frozenset(('omitempty', 'attr', 'chardata', 'comment', 'any', 'innerxml', 'cdata'))


def parse_tag(annotation: str) -> FieldSpec | None:
    """Parse a field annotation. Returns None if the annotation is empty."""
    if not annotation:
        return None
    head, _, tail = annotation.partition(',')
    namespace, _, tag_name = head.partition(' ')
    tag_name = tag_name.replace(' ', '')
    if not tag_name and namespace:
        # with a single token in the first entry, that token is the name
        namespace, tag_name = '', namespace
    flags = {token.replace(' ', '').lower() for token in tail.split(',')} & _flags if tail else set()
    return FieldSpec(namespace=namespace, tag_name=tag_name, **dict.fromkeys(flags, True))


def split_prefix(name: str) -> tuple[str, str]:
    """Split a 'prefix:local' name at the last colon into (prefix, local)"""
    prefix, _, local = name.rpartition(':')
    return prefix, local


def strip_prefix(name: str) -> str:
    return name.rpartition(':')[2]
