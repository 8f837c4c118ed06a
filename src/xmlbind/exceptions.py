# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later


__all__ = (  # noqa: RUF022
    'XMLBindError',
    'InvalidTargetError',
    'MissingRootNameError',
    'UnsupportedTypeError',
    'ParseFailureError',
    'NumericOverflowError',
    'MissingAttributeError',
    'MalformedDocumentError',
    'InvalidValueError',
    'CyclicValueError',
    'DepthLimitError',
)


class XMLBindError(Exception):
    """Base class for all the errors raised while converting between objects and XML."""


class InvalidTargetError(XMLBindError, TypeError):
    """Raised when the object passed to marshal/unmarshal is not a dataclass with fields."""


class MissingRootNameError(XMLBindError, ValueError):
    """
    Raised when encoding a dataclass that does not define the root element name.

    The name is taken from the tag of the ``xml_name`` field (or from its
    value when the tag does not specify one).

    """


class UnsupportedTypeError(XMLBindError, TypeError):
    """Raised when a field's type cannot be represented as XML text."""


class ParseFailureError(XMLBindError, ValueError):
    """Raised when text from the document cannot be converted to the field's type."""


class NumericOverflowError(XMLBindError, ValueError):
    """Raised when a number does not fit in the bit width declared for its field."""


class MissingAttributeError(XMLBindError, ValueError):
    """Raised when decoding an attribute field whose attribute is not present on the element."""


class MalformedDocumentError(XMLBindError, ValueError):
    """
    Raised when the input cannot be parsed into an XML document.

    The parser recovers from minor errors, so this only happens when no root
    element can be salvaged from the input. The ``__cause__`` attribute holds
    the lxml error when there is one.

    """


class InvalidValueError(XMLBindError, ValueError):
    """Raised when a field value cannot be written to the XML document (for example bytes that are not valid UTF-8)."""


class CyclicValueError(XMLBindError, ValueError):
    """Raised when encoding an object graph that refers back to one of its own ancestors."""


class DepthLimitError(XMLBindError, RecursionError):
    """Raised when a traversal goes deeper than the configured maximum depth."""
