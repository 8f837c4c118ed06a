# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from typing import Protocol

from lxml import etree

from .exceptions import MalformedDocumentError

__all__ = (  # noqa: RUF022
    'ETreeElement',
    'ETreeDocument',
    'ParseOptions',
    'DEFAULT_PARSE_OPTIONS',
    'NSCLEAN_PARSE_OPTIONS',
    'TreeProvider',
    'LXMLTreeProvider',
)


# noinspection PyProtectedMember
type ETreeElement = etree._Element  # noqa: SLF001
# noinspection PyProtectedMember
type ETreeDocument = etree._ElementTree  # noqa: SLF001


@dataclass(frozen=True, slots=True)
class ParseOptions:
    """
    The libxml2 parser settings used by the tree provider.

    The parser never touches the network, does not load external DTDs and
    does not expand entities. Errors and warnings are collected in the
    parser's error log instead of being reported.
    """

    recover: bool = True
    no_network: bool = True
    load_dtd: bool = False
    resolve_entities: bool = False
    ns_clean: bool = False
    strip_cdata: bool = True
    remove_comments: bool = False

    def parser(self) -> etree.XMLParser:
        return etree.XMLParser(
            recover=self.recover,
            no_network=self.no_network,
            load_dtd=self.load_dtd,
            resolve_entities=self.resolve_entities,
            ns_clean=self.ns_clean,
            strip_cdata=self.strip_cdata,
            remove_comments=self.remove_comments,
        )


DEFAULT_PARSE_OPTIONS = ParseOptions()
NSCLEAN_PARSE_OPTIONS = ParseOptions(ns_clean=True, strip_cdata=False)


class TreeProvider[N, D](Protocol):
    """The XML tree operations the encoder and decoder are built on"""

    # construction and mutation

    def create_element(self, local_name: str, namespace: str | None = None, prefix: str | None = None) -> N: ...

    def add_child(self, parent: N, child: N) -> None: ...

    def add_comment(self, node: N, text: str) -> None: ...

    def set_attribute(self, node: N, name: str, value: str) -> None: ...

    def set_content(self, node: N, text: str, *, cdata: bool = False) -> None: ...

    # inspection

    def local_name(self, node: N) -> str: ...

    def namespace(self, node: N) -> str: ...

    def content(self, node: N) -> str: ...

    def attribute(self, node: N, name: str) -> str | None: ...

    def children(self, node: N) -> list[N]: ...

    def comments(self, node: N) -> list[str]: ...

    def markup(self, node: N) -> str: ...

    # documents

    def create_document(self, root: N) -> D: ...

    def parse(self, data: str | bytes) -> D: ...

    def parsed(self, data: str | bytes) -> AbstractContextManager[N]: ...

    def serialize(self, document: D) -> str: ...

    def normalize_namespaces(self, document: D) -> D: ...

    def release(self, document: D) -> None: ...


class LXMLTreeProvider:
    """A TreeProvider that builds and reads lxml element trees"""

    def __init__(self, parse_options: ParseOptions = DEFAULT_PARSE_OPTIONS, cleanup_options: ParseOptions = NSCLEAN_PARSE_OPTIONS) -> None:
        self.parse_options = parse_options
        self.cleanup_options = cleanup_options

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(parse_options={self.parse_options!r}, cleanup_options={self.cleanup_options!r})'

    # lxml binds the namespace declarations of an element when it is created,
    # so the namespace is given to create_element instead of being set later.
    def create_element(self, local_name: str, namespace: str | None = None, prefix: str | None = None) -> ETreeElement:
        if namespace:
            return etree.Element(f'{{{namespace}}}{local_name}', nsmap={prefix or None: namespace})
        return etree.Element(local_name)

    def add_child(self, parent: ETreeElement, child: ETreeElement) -> None:
        parent.append(child)

    def add_comment(self, node: ETreeElement, text: str) -> None:
        node.append(etree.Comment(text))

    def set_attribute(self, node: ETreeElement, name: str, value: str) -> None:
        node.set(name, value)

    def set_content(self, node: ETreeElement, text: str, *, cdata: bool = False) -> None:
        node.text = etree.CDATA(text) if cdata else text

    def local_name(self, node: ETreeElement) -> str:
        return etree.QName(node).localname

    def namespace(self, node: ETreeElement) -> str:
        return etree.QName(node).namespace or ''

    def content(self, node: ETreeElement) -> str:
        """The character data of the node itself, without the text of its child elements"""
        return (node.text or '') + ''.join(child.tail or '' for child in node)

    def attribute(self, node: ETreeElement, name: str) -> str | None:
        return node.get(name)

    def children(self, node: ETreeElement) -> list[ETreeElement]:
        return [child for child in node if isinstance(child.tag, str)]

    def comments(self, node: ETreeElement) -> list[str]:
        return [child.text or '' for child in node if child.tag is etree.Comment]

    def markup(self, node: ETreeElement) -> str:
        return etree.tostring(node, encoding='unicode', with_tail=False)

    def create_document(self, root: ETreeElement) -> ETreeDocument:
        return etree.ElementTree(root)

    def parse(self, data: str | bytes) -> ETreeDocument:
        if isinstance(data, str):
            data = data.encode('utf-8')
        try:
            root = etree.fromstring(data, self.parse_options.parser())
        except etree.XMLSyntaxError as exc:
            raise MalformedDocumentError(f'cannot parse XML document: {exc!s}') from exc
        if root is None:
            raise MalformedDocumentError('cannot parse XML document: no root element')
        return root.getroottree()

    @contextmanager
    def parsed(self, data: str | bytes) -> Iterator[ETreeElement]:
        """Parse a document and provide its root element, releasing the tree on exit"""
        document = self.parse(data)
        try:
            yield document.getroot()
        finally:
            self.release(document)

    def serialize(self, document: ETreeDocument) -> str:
        return etree.tostring(document, encoding='UTF-8', xml_declaration=True).decode('utf-8')

    def normalize_namespaces(self, document: ETreeDocument) -> ETreeDocument:
        """Remove the redundant and unused namespace declarations from a document"""
        root = etree.fromstring(etree.tostring(document), self.cleanup_options.parser())
        etree.cleanup_namespaces(root)
        return root.getroottree()

    def release(self, document: ETreeDocument) -> None:
        root = document.getroot()
        if root is not None:
            root.clear()
