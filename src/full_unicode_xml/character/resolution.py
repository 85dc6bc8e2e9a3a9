"""Resolution of system ids into byte streams.

A system id is either an absolute URI, opened through ``urllib``, or a path
on the local file system.
"""

import urllib.request
from pathlib import Path
from typing import BinaryIO
from urllib.parse import urlsplit

# Schemes of this length are Windows drive letters, not URI schemes
DRIVE_LETTER_LENGTH = 1


def is_absolute_uri(system_id: str) -> bool:
    """Return whether a system id is an absolute URI rather than a file path.

    Args:
        system_id: URI or file path

    Returns:
        True if the system id has a scheme other than a drive letter
    """
    try:
        scheme = urlsplit(system_id).scheme
    except ValueError:
        return False
    return len(scheme) > DRIVE_LETTER_LENGTH


def open_system_id(system_id: str) -> BinaryIO:
    """Open the resource identified by a system id for binary reading.

    Args:
        system_id: Absolute URI or local file path

    Returns:
        Binary stream positioned at the start of the resource

    Raises:
        OSError: If the file cannot be opened
        urllib.error.URLError: If the URI cannot be opened
    """
    if is_absolute_uri(system_id):
        return urllib.request.urlopen(system_id)
    return Path(system_id).open("rb")
