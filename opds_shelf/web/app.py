"""
Web Application Module
Starlette application serving the OPDS catalog, admin pages, covers and
book files.
"""

import logging
import os
from typing import Optional

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import (
    FileResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)
from starlette.middleware import Middleware
from starlette.routing import Route

from opds_shelf.conf import Config, load_config
from opds_shelf.core.exceptions import CoverError, ValidationError
from opds_shelf.cover import extract_cover, guess_mime_type, split_extension, supports_cover
from opds_shelf.library import (
    DEFAULT_SORT_MODE,
    EpubMetadata,
    cleanup_title,
    delete_book,
    get_books_list,
    get_epub_metadata,
    make_book_info,
    rename_book,
    resolve_book_path,
    save_upload,
    sort_books,
)
from opds_shelf.web.opds import OPDS_MEDIA_TYPE, render_feed
from opds_shelf.web.auth import (
    AUTH_COOKIE,
    AUTH_COOKIE_MAX_AGE,
    LOGIN_PATH,
    AdminAuthMiddleware,
    check_credentials,
    is_authenticated,
    session_token,
)
from opds_shelf.web.templating import admin_context, simple_context, templates

logger = logging.getLogger(__name__)

COVER_CACHE_CONTROL = 'public, max-age=86400'


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_base_url(request: Request) -> str:
    """
    Scheme and authority for absolute links.

    Behind a reverse proxy the configured proxy host/port is used instead
    of the request's Host header.
    """
    config = get_config(request)
    scheme = request.url.scheme
    if config.reverse_proxy:
        return f'{scheme}://{config.reverse_proxy_host}:{config.reverse_proxy_port}'
    host = request.headers.get('host') or request.url.netloc
    return f'{scheme}://{host}'


def _redirect_admin() -> RedirectResponse:
    return RedirectResponse('/admin', status_code=303)


async def _list_books(request: Request, default_sort: str):
    config = get_config(request)
    sort_mode = request.query_params.get('sort') or default_sort
    books = await run_in_threadpool(get_books_list, config.books_dir, config.cover_settings.mime_types)
    return sort_books(books, sort_mode), sort_mode


async def opds_index(request: Request) -> Response:
    books, _ = await _list_books(request, '')
    config = get_config(request)
    feed = render_feed(books, get_base_url(request), config.catalog_title)
    return Response(feed, media_type=OPDS_MEDIA_TYPE)


async def admin(request: Request) -> Response:
    books, sort_mode = await _list_books(request, DEFAULT_SORT_MODE)
    return templates.TemplateResponse(request, 'admin.html', admin_context(books, sort_mode))


async def simple(request: Request) -> Response:
    books, _ = await _list_books(request, '')
    return templates.TemplateResponse(request, 'simple.html', simple_context(books))


async def cover(request: Request) -> Response:
    """
    Serve the embedded cover of a book.

    Every failure, from an unsafe name to an unsupported format, is answered
    with 404; the specific cause is only logged.
    """
    config = get_config(request)
    filename = request.path_params['filename']
    try:
        path = resolve_book_path(config.books_dir, filename)
    except ValidationError as e:
        logger.warning(f'Rejected cover request for {filename!r}: {e}')
        return PlainTextResponse('File not found', status_code=404)
    if not os.path.isfile(path):
        return PlainTextResponse('File not found', status_code=404)

    try:
        result = await run_in_threadpool(extract_cover, path, config.cover_settings)
    except CoverError as e:
        logger.warning(f'Error extracting cover for {filename}: {e.kind}: {e}')
        return PlainTextResponse('Cover not found', status_code=404)

    return Response(
        result.data,
        media_type=result.mime_type,
        headers={'Cache-Control': COVER_CACHE_CONTROL},
    )


async def download(request: Request) -> Response:
    config = get_config(request)
    filename = request.path_params['filename']
    try:
        path = resolve_book_path(config.books_dir, filename)
    except ValidationError:
        return PlainTextResponse('File not found', status_code=404)
    if not os.path.isfile(path):
        return PlainTextResponse('File not found', status_code=404)
    return FileResponse(
        path,
        media_type=guess_mime_type(path, config.cover_settings.mime_types),
        filename=os.path.basename(path),
    )


async def upload(request: Request) -> Response:
    config = get_config(request)
    async with request.form() as form:
        book: Optional[UploadFile] = form.get('book')
        if not isinstance(book, UploadFile) or not book.filename:
            return PlainTextResponse('Error retrieving file', status_code=400)

        logger.info(f'Starting upload for file: {book.filename}')
        try:
            await run_in_threadpool(
                save_upload, config.books_dir, book.filename, book.file, config.max_upload_bytes
            )
        except ValidationError as e:
            logger.warning(f'Rejected upload {book.filename!r}: {e}')
            return PlainTextResponse(str(e), status_code=400)
        except FileExistsError:
            return PlainTextResponse('Destination file already exists', status_code=409)
        except OSError as e:
            logger.error(f'Error saving upload {book.filename!r}: {e}')
            return PlainTextResponse('Error saving file', status_code=500)

    logger.info(f'Successfully uploaded file: {book.filename}')
    return _redirect_admin()


async def delete(request: Request) -> Response:
    config = get_config(request)
    filename = request.path_params['filename']
    logger.info(f'Attempting to delete file: {filename}')
    try:
        await run_in_threadpool(delete_book, config.books_dir, filename)
    except (ValidationError, FileNotFoundError) as e:
        logger.warning(f'File not found for deletion: {filename} ({e})')
        return PlainTextResponse('File not found', status_code=404)
    except OSError as e:
        logger.error(f'Error deleting file {filename}: {e}')
        return PlainTextResponse('Error deleting file', status_code=500)

    logger.info(f'Successfully deleted file: {filename}')
    return _redirect_admin()


async def rename(request: Request) -> Response:
    config = get_config(request)
    form = await request.form()
    old_filename = str(form.get('oldFilename') or '')
    new_filename = str(form.get('newFilename') or '')
    if not old_filename or not new_filename:
        return PlainTextResponse('Missing filenames', status_code=400)

    try:
        await run_in_threadpool(rename_book, config.books_dir, old_filename, new_filename)
    except ValidationError as e:
        return PlainTextResponse(str(e), status_code=400)
    except FileNotFoundError:
        return PlainTextResponse('Original file not found', status_code=404)
    except FileExistsError:
        return PlainTextResponse('Destination file already exists', status_code=409)
    except OSError as e:
        logger.error(f'Error renaming file: {e}')
        return PlainTextResponse('Error renaming file', status_code=500)

    return _redirect_admin()


async def book_info(request: Request) -> Response:
    """
    Details page for one book.

    EPUB files also show their Dublin Core metadata; a metadata failure is
    logged and the page falls back to the cleaned file name.
    """
    config = get_config(request)
    filename = request.path_params['filename']
    try:
        path = resolve_book_path(config.books_dir, filename)
    except ValidationError:
        return PlainTextResponse('File not found', status_code=404)
    if not os.path.isfile(path):
        return PlainTextResponse('File not found', status_code=404)

    book = make_book_info(filename, os.stat(path), config.cover_settings.mime_types)
    metadata = EpubMetadata()
    if split_extension(path) == '.epub':
        try:
            metadata = await run_in_threadpool(get_epub_metadata, path, config.cover_settings)
        except CoverError as e:
            logger.warning(f'Error reading metadata for {filename}: {e.kind}: {e}')

    return templates.TemplateResponse(request, 'book_info.html', {
        'title': metadata.title or cleanup_title(os.path.basename(path)),
        'filename': filename,
        'book': book,
        'metadata': metadata.present(),
        'has_cover': supports_cover(path),
    })


async def login_form(request: Request) -> Response:
    config = get_config(request)
    if is_authenticated(config, request):
        return _redirect_admin()
    return templates.TemplateResponse(request, 'login.html', {
        'title': 'Login',
        'error': bool(request.query_params.get('error')),
    })


async def login(request: Request) -> Response:
    config = get_config(request)
    if not config.auth_enabled:
        return _redirect_admin()

    form = await request.form()
    username = str(form.get('username') or '')
    password = str(form.get('password') or '')
    if not check_credentials(config, username, password):
        logger.warning(f'Failed login for user {username!r}')
        return RedirectResponse(f'{LOGIN_PATH}?error=1', status_code=303)

    logger.info(f'User {username!r} logged in')
    response = _redirect_admin()
    response.set_cookie(
        AUTH_COOKIE,
        session_token(config),
        max_age=AUTH_COOKIE_MAX_AGE,
        path='/',
        httponly=True,
        samesite='lax',
    )
    return response


async def logout(request: Request) -> Response:
    response = RedirectResponse(LOGIN_PATH, status_code=303)
    response.delete_cookie(AUTH_COOKIE, path='/')
    return response


def create_app(config: Optional[Config] = None) -> Starlette:
    """
    Build the application.

    Args:
        config: Settings; read from the environment when omitted

    Returns:
        Starlette: ASGI application with config on app.state
    """
    config = config or load_config()
    os.makedirs(config.books_dir, exist_ok=True)

    routes = [
        Route('/', opds_index, methods=['GET']),
        Route('/admin', admin, methods=['GET']),
        Route('/simple', simple, methods=['GET']),
        Route('/cover/{filename:path}', cover, methods=['GET']),
        Route('/books/{filename:path}', download, methods=['GET']),
        Route('/upload', upload, methods=['POST']),
        Route('/delete/{filename:path}', delete, methods=['POST']),
        Route('/rename', rename, methods=['POST']),
        Route('/book/info/{filename:path}', book_info, methods=['GET']),
        Route(LOGIN_PATH, login_form, methods=['GET']),
        Route(LOGIN_PATH, login, methods=['POST']),
        Route('/user/logout', logout, methods=['GET']),
    ]
    middleware = [Middleware(AdminAuthMiddleware, config=config)]

    app = Starlette(routes=routes, middleware=middleware)
    app.state.config = config
    logger.info(f'Serving books from {os.path.abspath(config.books_dir)}')
    if not config.auth_enabled:
        logger.warning('ADMIN_USERNAME/ADMIN_PASSWORD not set, admin routes are unprotected')
    return app
