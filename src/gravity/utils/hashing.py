"""
Content fingerprints for Gravity.

Fingerprints are SHA-256 hex digests. Equality of two fingerprints is used
as a proxy for equality of the underlying content.
"""

import hashlib
from pathlib import Path
from typing import Optional, Union

CHUNK_SIZE = 64 * 1024


def hash_bytes(data: bytes) -> str:
    """Fingerprint raw bytes."""
    return hashlib.sha256(data).hexdigest()


def hash_string(text: str, encoding: str = 'utf-8') -> str:
    """Fingerprint a string using its encoded bytes."""
    return hash_bytes(text.encode(encoding))


def hash_file(path: Union[str, Path]) -> Optional[str]:
    """
    Fingerprint the content of a regular file.

    Returns None when the path is missing, is not a regular file, or cannot be
    read. None is never a valid fingerprint, so callers can tell "absent" apart
    from an empty file.
    """
    path = Path(path)
    digest = hashlib.sha256()
    try:
        if not path.is_file():
            return None
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError:
        return None
    return digest.hexdigest()
