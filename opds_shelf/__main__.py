"""
Command line entry point.

    python -m opds_shelf serve [--host H] [--port P] [--books-dir DIR]
    python -m opds_shelf cover BOOK [-o OUT]
    python -m opds_shelf list [--sort MODE]
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from opds_shelf import __version__
from opds_shelf.conf import Config, load_config
from opds_shelf.core.exceptions import ConfigError, CoverError
from opds_shelf.cover import extract_cover
from opds_shelf.library import SORT_MODES, format_date, format_size, get_books_list, sort_books

logger = logging.getLogger('opds_shelf')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='opds-shelf',
        description='Personal e-book server with an OPDS catalog.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--log-level', default=None, help='Override OPDS_LOG_LEVEL (DEBUG, INFO, ...)')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the HTTP server')
    serve.add_argument('--host', default=None, help='Listen host (HOST)')
    serve.add_argument('--port', type=int, default=None, help='Listen port (PORT)')
    serve.add_argument('--books-dir', default=None, help='Library root (BOOKS_DIR)')

    cover = sub.add_parser('cover', help='Extract the cover of one book')
    cover.add_argument('book', help='Path to an .epub, .cbz, .fb2 or .fb2.zip file')
    cover.add_argument('-o', '--output', default=None, help='Write the image here instead of stdout')

    listing = sub.add_parser('list', help='List the books in the library')
    listing.add_argument('--sort', choices=SORT_MODES, default='name-asc')
    listing.add_argument('--books-dir', default=None, help='Library root (BOOKS_DIR)')

    return parser


def _override(config: Config, args: argparse.Namespace) -> Config:
    changes = {}
    for field in ('host', 'port', 'books_dir'):
        value = getattr(args, field, None)
        if value is not None:
            changes[field] = value
    return dataclasses.replace(config, **changes) if changes else config


def run_serve(config: Config) -> int:
    import uvicorn
    from opds_shelf.web import create_app

    logger.info(f'Starting server with {config.summary()}')
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


def run_cover(config: Config, book: str, output: Optional[str]) -> int:
    try:
        result = extract_cover(book, config.cover_settings)
    except CoverError as e:
        print(f'{e.kind}: {e}', file=sys.stderr)
        return 1

    if output:
        with open(output, 'wb') as f:
            f.write(result.data)
        print(f'{result.mime_type} {len(result)} bytes -> {output}')
    else:
        sys.stdout.buffer.write(result.data)
    return 0


def run_list(config: Config, sort_mode: str) -> int:
    books = sort_books(get_books_list(config.books_dir), sort_mode)
    for book in books:
        print(f'{book.simple_mime:<6} {format_size(book.size):>10}  {format_date(book.last_updated)}  {book.filename}')
    if not books:
        print(f'No books in {config.books_dir}')
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = _override(load_config(), args)
    except ConfigError as e:
        print(f'Configuration error: {e}', file=sys.stderr)
        return 2

    level_name = (args.log_level or config.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    if args.command == 'serve':
        return run_serve(config)
    if args.command == 'cover':
        return run_cover(config, args.book, args.output)
    return run_list(config, args.sort)


if __name__ == '__main__':
    sys.exit(main())
