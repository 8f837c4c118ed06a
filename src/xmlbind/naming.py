# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from typing import NamedTuple

from .descriptors import StructField
from .tag import split_prefix

__all__ = 'ResolvedName', 'resolve_name'


class ResolvedName(NamedTuple):
    namespace: str
    prefix: str
    local: str

    @property
    def qualname(self) -> str:
        return f'{self.prefix}:{self.local}' if self.prefix else self.local


def resolve_name(field: StructField) -> ResolvedName:
    """
    Determine the XML name of a field.

    The name comes from the field's tag, then from the field's identifier
    and finally from the name of the field's type. Both the encoder and the
    decoder go through this, which keeps the two directions symmetric.

    A 'prefix:local' name is split at the last colon. The prefix is only
    used to declare the namespace when creating elements, it plays no role
    when matching elements by name and namespace.
    """
    if field.spec is not None and field.spec.tag_name:
        namespace, name = field.spec.namespace, field.spec.tag_name
    else:
        namespace, name = '', field.name
    if not name:
        name = field.type.name
    prefix, local = split_prefix(name)
    return ResolvedName(namespace, prefix, local)
