# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import dataclass, field
from typing import Annotated

from xmlbind import Tag, XMLName
from xmlbind.descriptors import Struct, StructField, TypeInspector
from xmlbind.naming import ResolvedName, resolve_name


@dataclass
class Address:
    xml_name: XMLName = XMLName()
    city: str = ''


@dataclass
class Contact:
    xml_name: Annotated[XMLName, Tag('urn:example:contacts contact')] = XMLName()
    name: str = ''
    email: Annotated[str, Tag('mail')] = ''
    phone: Annotated[str, Tag('urn:example:phone p:phone')] = ''
    note: Annotated[str, Tag(',omitempty')] = ''
    address: Address | None = None
    addresses: list[Address] = field(default_factory=list)


class TestNameResolution:

    def test_resolved_name(self) -> None:
        assert ResolvedName('', '', 'item').qualname == 'item'
        assert ResolvedName('urn:x', 'x', 'item').qualname == 'x:item'

    def test_field_names(self) -> None:
        inspector = TypeInspector()
        names = {struct_field.name: resolve_name(struct_field) for struct_field in inspector.fields(Struct(Contact))}

        assert names['xml_name'] == ResolvedName('urn:example:contacts', '', 'contact')
        assert names['name'] == ResolvedName('', '', 'name')
        assert names['email'] == ResolvedName('', '', 'mail')
        assert names['phone'] == ResolvedName('urn:example:phone', 'p', 'phone')
        # a tag without a name falls back to the identifier
        assert names['note'] == ResolvedName('', '', 'note')
        assert names['address'] == ResolvedName('', '', 'address')
        assert names['addresses'] == ResolvedName('', '', 'addresses')

    def test_type_name_fallback(self) -> None:
        inspector = TypeInspector()

        # fields without an identifier do not occur in dataclasses, but the descriptors still provide a name
        assert resolve_name(StructField('', inspector.describe(Address))) == ResolvedName('', '', 'Address')
        assert resolve_name(StructField('', inspector.describe(Address | None))) == ResolvedName('', '', 'Address')
        assert resolve_name(StructField('', inspector.describe(list[Address]))) == ResolvedName('', '', 'Address')
        assert resolve_name(StructField('', inspector.describe(str))) == ResolvedName('', '', 'str')
