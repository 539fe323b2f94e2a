"""
System Utilities - Imperative Shell

Process exit helper for command-line programs and file-name parsing.
Library code never calls die(); it raises a Problem and lets the CLI decide.
"""

import os
import sys
from pathlib import PurePath
from typing import NoReturn, Union

from problems import check_not_none


def get_file_extension(filepath: Union[str, os.PathLike]) -> str:
    """Get file extension from a file path

    Only the last path segment is inspected, and only the part after its
    last dot is returned.

    Args:
        filepath: Relative or absolute file path

    Returns:
        Lowercase extension without the dot, or "" when there is none

    Raises:
        InvalidArgumentError: If filepath is None

    Examples:
        >>> get_file_extension("archive.tar.gz")
        'gz'
        >>> get_file_extension("/abc/README")
        ''
    """
    check_not_none(filepath, "file path")

    name = PurePath(filepath).name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def die(message: str, *args, status: int = 1) -> NoReturn:
    """Print a message and terminate the process

    Args:
        message: printf-style format string
        *args: Arguments for the format string
        status: Exit status (default 1)
    """
    print(message % args if args else message)
    sys.exit(status)
