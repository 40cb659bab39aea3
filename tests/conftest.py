"""
Pytest configuration and shared fixtures.

This module provides:
- Temporary directory fixtures
- Builders for EPUB, CBZ and FB2 test books
- Small image payloads with recognizable bytes
"""
import base64
import sys
import zipfile
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Not real images; extraction never decodes them
JPEG_BYTES = b'\xff\xd8\xff\xe0' + b'fake-jpeg-cover' + b'\xff\xd9'
PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'fake-png-cover'

ZipEntries = Union[Dict[str, bytes], Iterable[Tuple[str, bytes]]]

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

OPF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>Test Book</dc:title>
    <dc:identifier id="uid">urn:uuid:1234</dc:identifier>
    {metas}
  </metadata>
  <manifest>
    <item id="chapter1" href="chapter1.xhtml" media-type="application/xhtml+xml"/>
    {items}
  </manifest>
  <spine>
    <itemref idref="chapter1"/>
  </spine>
</package>
"""

FB2_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<FictionBook xmlns="http://www.gribuser.ru/xml/fictionbook/2.0" xmlns:l="http://www.w3.org/1999/xlink">
  <description>
    <title-info>
      <book-title>Test Book</book-title>
      {coverpage}
    </title-info>
  </description>
  <body><section><p>Hello.</p></section></body>
  {binaries}
</FictionBook>
"""


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Return a fresh temporary directory for a single test."""
    return tmp_path


def write_zip(path: Path, entries: ZipEntries) -> Path:
    """Write a zip archive with the given (name, content) members, in order."""
    items = entries.items() if isinstance(entries, dict) else entries
    with zipfile.ZipFile(path, 'w', zipfile.ZIP_DEFLATED) as zf:
        for name, content in items:
            zf.writestr(name, content)
    return path


def build_opf(metas: str = '', items: str = '') -> str:
    return OPF_TEMPLATE.format(metas=metas, items=items)


def build_fb2(coverpage_href: Optional[str] = None,
              binaries: Iterable[Tuple[str, str, bytes]] = (),
              href_attr: str = 'l:href') -> str:
    """
    Build an FB2 document.

    Args:
        coverpage_href: href of the coverpage image, or None for no coverpage
        binaries: (id, content-type, raw bytes) triples, base64-encoded here
        href_attr: Qualified attribute name used for the href
    """
    coverpage = ''
    if coverpage_href is not None:
        coverpage = f'<coverpage><image {href_attr}="{coverpage_href}"/></coverpage>'
    nodes = []
    for binary_id, content_type, raw in binaries:
        encoded = base64.encodebytes(raw).decode('ascii')
        nodes.append(f'<binary id="{binary_id}" content-type="{content_type}">\n{encoded}</binary>')
    return FB2_TEMPLATE.format(coverpage=coverpage, binaries='\n  '.join(nodes))


@pytest.fixture
def make_zip(temp_dir: Path) -> Callable[..., Path]:
    """Factory: make_zip('name.cbz', {'a.jpg': b'...'}) -> path."""
    def _make(name: str, entries: ZipEntries) -> Path:
        return write_zip(temp_dir / name, entries)
    return _make


@pytest.fixture
def make_epub(temp_dir: Path) -> Callable[..., Path]:
    """
    Factory for EPUB files.

    make_epub(metas=..., items=..., files={...}, opf_path='OEBPS/content.opf')
    Pass container=None to omit META-INF/container.xml.
    """
    def _make(metas: str = '', items: str = '', files: Optional[Dict[str, bytes]] = None,
              opf_path: str = 'OEBPS/content.opf', name: str = 'book.epub',
              container: Optional[str] = CONTAINER_XML, opf: Optional[str] = None) -> Path:
        entries = [('mimetype', b'application/epub+zip')]
        if container is not None:
            entries.append(('META-INF/container.xml', container.format(opf_path=opf_path).encode('utf-8')))
        entries.append((opf_path, (opf if opf is not None else build_opf(metas, items)).encode('utf-8')))
        entries.append(('OEBPS/chapter1.xhtml', b'<html><body><p>Hi</p></body></html>'))
        for member, content in (files or {}).items():
            entries.append((member, content))
        return write_zip(temp_dir / name, entries)
    return _make


@pytest.fixture
def make_fb2(temp_dir: Path) -> Callable[..., Path]:
    """Factory: make_fb2(coverpage_href='#img1', binaries=[...]) -> .fb2 path."""
    def _make(coverpage_href: Optional[str] = None,
              binaries: Iterable[Tuple[str, str, bytes]] = (),
              name: str = 'book.fb2', href_attr: str = 'l:href') -> Path:
        path = temp_dir / name
        path.write_text(build_fb2(coverpage_href, binaries, href_attr), encoding='utf-8')
        return path
    return _make


@pytest.fixture
def books_dir(temp_dir: Path) -> Path:
    """Empty library root."""
    path = temp_dir / 'books'
    path.mkdir()
    return path
