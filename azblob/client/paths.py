"""Blob path helpers."""

from typing import Optional, Tuple


def split_path_segment(path: str) -> Tuple[str, Optional[str]]:
    """
    Split ``/container/blob...`` into the container and the rest.

    One leading ``/`` is stripped. The rest is None, not an empty string,
    when there is no further ``/`` or nothing follows it.

    Example:
        >>> split_path_segment("/a/b/c")
        ('a', 'b/c')
        >>> split_path_segment("/a/")
        ('a', None)
    """
    if path.startswith("/"):
        path = path[1:]

    container, separator, rest = path.partition("/")
    if not separator or not rest:
        return container, None

    return container, rest
