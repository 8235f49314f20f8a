"""Image upload intake and cleanup.

Uploaded files arrive as Werkzeug ``FileStorage`` objects. A batch is checked
as a whole before anything touches the disk; stored files are referenced by
their public URL (``/static/uploads/<name>``).
"""
import logging
import os
import random
import time
from dataclasses import dataclass, field

from flask import current_app
from werkzeug.utils import secure_filename

from errors import InvalidMedia

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_TYPES = frozenset({'jpeg', 'jpg', 'png', 'gif', 'webp'})


@dataclass(frozen=True)
class MediaConstraints:
    max_count: int = 5
    max_size_bytes: int = 5 * 1024 * 1024
    allowed_types: frozenset = field(default=DEFAULT_ALLOWED_TYPES)

    @classmethod
    def from_config(cls, config):
        return cls(max_count=config.get('MAX_IMAGE_COUNT', 5),
                   max_size_bytes=config.get('MAX_IMAGE_SIZE', 5 * 1024 * 1024),
                   allowed_types=frozenset(config.get('ALLOWED_IMAGE_TYPES', DEFAULT_ALLOWED_TYPES)))


def _extension(filename):
    if '.' not in filename:
        return ''
    return filename.rsplit('.', 1)[1].lower()


def _size_of(upload):
    stream = upload.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def check_file(upload, constraints):
    name = upload.filename or ''
    ext = _extension(name)
    if ext not in constraints.allowed_types:
        raise InvalidMedia(f'"{name}" is not an allowed image type.')
    major, _, minor = (upload.mimetype or '').partition('/')
    if major != 'image' or minor.lower() not in constraints.allowed_types:
        raise InvalidMedia(f'"{name}" is not an image.')
    if _size_of(upload) > constraints.max_size_bytes:
        limit_mb = constraints.max_size_bytes // (1024 * 1024)
        raise InvalidMedia(f'"{name}" is too large. Maximum size is {limit_mb}MB.')


def unique_name(filename):
    ext = _extension(secure_filename(filename) or filename)
    suffix = f'{int(time.time() * 1000)}-{random.randint(0, 10 ** 9 - 1):09d}'
    return f'product-{suffix}.{ext}' if ext else f'product-{suffix}'


def accept(files, constraints=None):
    """Validate and store a batch of uploads, returning their public refs.

    Either every file is stored or none is: validation runs over the whole
    batch first, and a failed write removes what was already written.
    """
    if constraints is None:
        constraints = MediaConstraints.from_config(current_app.config)
    uploads = [f for f in (files or []) if f and f.filename]
    if not uploads:
        return []
    if len(uploads) > constraints.max_count:
        raise InvalidMedia(f'You can upload at most {constraints.max_count} images.')
    for upload in uploads:
        check_file(upload, constraints)

    folder = current_app.config['UPLOAD_FOLDER']
    prefix = current_app.config['UPLOAD_URL_PREFIX']
    os.makedirs(folder, exist_ok=True)
    refs = []
    for upload in uploads:
        filename = unique_name(upload.filename)
        try:
            upload.stream.seek(0)
            upload.save(os.path.join(folder, filename))
        except OSError:
            logger.exception('Failed to store upload %s', upload.filename)
            discard(refs)
            raise InvalidMedia('Could not store uploaded image.')
        refs.append(prefix + filename)
    logger.info('Stored %d image(s)', len(refs))
    return refs


def is_placeholder(ref):
    return ref == current_app.config['PLACEHOLDER_IMAGE']


def path_for(ref):
    """Filesystem path behind an upload ref, or None for any other ref."""
    prefix = current_app.config['UPLOAD_URL_PREFIX']
    if not ref or is_placeholder(ref) or not ref.startswith(prefix):
        return None
    name = secure_filename(ref[len(prefix):])
    if not name:
        return None
    return os.path.join(current_app.config['UPLOAD_FOLDER'], name)


def discard(refs):
    for ref in refs or []:
        path = path_for(ref)
        if path is None:
            continue
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.warning('Image already gone: %s', ref)
        except OSError:
            logger.warning('Could not delete image %s', ref, exc_info=True)
