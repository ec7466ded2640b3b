"""Named schema definitions shared by all endpoints of one generation run."""

import re
import threading
from urllib.parse import quote

DEFINITION_REF_PREFIX = "#/definitions/"

_GENERIC_NAME = re.compile(r"^[^<]+<(.+)>$")


def definition_name(type_name: str) -> str:
    """``list<app.SeaBean>`` => ``app.SeaBean``; spaces are removed."""
    match = _GENERIC_NAME.match(type_name)
    name = match.group(1) if match else type_name
    return name.replace(" ", "")


def definition_ref(name: str) -> str:
    return DEFINITION_REF_PREFIX + quote(name, safe="")


class DefinitionTable:
    """Insert-if-absent table of definition schemas.

    An entry is reserved before its properties are projected so recursive
    types reuse the reservation instead of re-entering.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._definitions: dict[str, dict] = {}
        self._frozen = False

    def reserve(self, name: str) -> bool:
        """Reserve ``name``; False when it already exists."""
        with self.lock:
            if self._frozen:
                raise RuntimeError(f"The definitions are frozen, cannot add: {name}")
            if name in self._definitions:
                return False
            self._definitions[name] = {}
            return True

    def fill(self, name: str, schema: dict) -> None:
        with self.lock:
            self._definitions[name].update(schema)

    def put_if_absent(self, name: str, schema: dict) -> bool:
        if not self.reserve(name):
            return False
        self.fill(name, schema)
        return True

    def get(self, name: str) -> dict | None:
        return self._definitions.get(name)

    def freeze(self) -> dict[str, dict]:
        self._frozen = True
        return dict(self._definitions)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
