"""
Markup Helpers Module
XML parsing shared by the EPUB and FB2 extractors.
"""

from typing import Optional

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from lxml import etree

from opds_shelf.core.exceptions import FormatError


def _strict_parser() -> etree.XMLParser:
    # Non-recovering; external entities and DTDs are never loaded
    return etree.XMLParser(
        recover=False,
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=False,
    )


def check_well_formed(data: bytes, path: Optional[str] = None) -> None:
    """
    Reject documents that are not well-formed XML.

    BeautifulSoup's XML builder repairs broken markup silently, so the raw
    bytes are first run through a non-recovering lxml parser.

    Raises:
        FormatError: On any syntax error (mismatched or unclosed tags,
            undefined entities, truncated input, unknown encoding)
    """
    try:
        etree.fromstring(data, _strict_parser())
    except (etree.XMLSyntaxError, ValueError, LookupError) as e:
        raise FormatError(f'Invalid XML: {e}', path) from e


def parse_xml(data: bytes, path: Optional[str] = None) -> BeautifulSoup:
    """
    Parse an XML document with BeautifulSoup's lxml-backed XML builder.

    Args:
        data: Raw document bytes (encoding taken from the XML declaration)
        path: Document location, used in error messages

    Returns:
        BeautifulSoup: Parsed document

    Raises:
        FormatError: If the markup is not well-formed or yields no root element
    """
    check_well_formed(data, path)
    try:
        soup = BeautifulSoup(data, 'xml')
    except (ParserRejectedMarkup, etree.ParseError) as e:
        raise FormatError(f'Invalid XML: {e}', path) from e

    if soup.find() is None:
        raise FormatError('Invalid XML: no root element', path)
    return soup


def local_attr(tag: Tag, name: str) -> str:
    """
    Get an attribute by local name, ignoring any namespace prefix.

    '<image l:href="#c"/>' and '<image xlink:href="#c"/>' both answer 'href'.
    An unprefixed attribute wins over prefixed ones.

    Returns:
        str: Attribute value, or '' if absent
    """
    value = tag.get(name)
    if value is not None:
        return str(value)
    for key, value in tag.attrs.items():
        if str(key).rsplit(':', 1)[-1] == name:
            return str(value)
    return ''
