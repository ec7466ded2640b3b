"""Naming policies: internal property name to public (wire) name."""

import re
from typing import Callable

NamingPolicy = Callable[[str], str]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def identity(name: str) -> str:
    return name


def camel_to_snake(name: str) -> str:
    """``seaName`` => ``sea_name``; snake names pass through."""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()
