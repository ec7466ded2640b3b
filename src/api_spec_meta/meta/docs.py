"""Documentation lookup for classes and their members.

Member comments are read from attribute docstrings, the string literal
placed right below an annotated attribute:

    class SeaBean:
        sea_name: str
        \"\"\"Sea Name e.g. SeaOfDreams\"\"\"
"""

import ast
import inspect
import logging
import os
import textwrap
from typing import Callable

from .typenames import type_name

logger = logging.getLogger(__name__)

DocLookup = Callable[[type, str | None], str | None]


def no_docs(owner: type, member: str | None) -> str | None:
    return None


class DocCache:
    """Parsed member docs keyed by (type, source file, mtime, size)."""

    def __init__(self):
        self._entries: dict[tuple, dict[str | None, str]] = {}

    def get(self, key: tuple) -> dict[str | None, str] | None:
        return self._entries.get(key)

    def put(self, key: tuple, docs: dict[str | None, str]) -> None:
        self._entries[key] = docs

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class SourceDocLookup:
    """Reads class docstrings and attribute docstrings from source code.

    Falls back to pydantic ``Field(description=...)`` when a member has no
    docstring.
    """

    def __init__(self, cache: DocCache | None = None):
        self.cache = cache if cache is not None else DocCache()

    def __call__(self, owner: type, member: str | None) -> str | None:
        doc = self.member_docs(owner).get(member)
        if doc is None and member is not None:
            doc = _pydantic_description(owner, member)
        return doc

    def member_docs(self, owner: type) -> dict[str | None, str]:
        try:
            path = inspect.getsourcefile(owner)
        except TypeError:
            return {}
        if not path or not os.path.exists(path):
            return {}
        stat = os.stat(path)
        key = (type_name(owner), path, stat.st_mtime_ns, stat.st_size)
        docs = self.cache.get(key)
        if docs is None:
            docs = _parse_member_docs(owner)
            self.cache.put(key, docs)
        return docs


def _parse_member_docs(owner: type) -> dict[str | None, str]:
    try:
        source = textwrap.dedent(inspect.getsource(owner))
        tree = ast.parse(source)
    except (OSError, TypeError, SyntaxError) as e:
        logger.debug("Cannot read the source of %s: %s", type_name(owner), e)
        return {}

    class_def = next((n for n in tree.body if isinstance(n, ast.ClassDef)), None)
    if class_def is None:
        return {}

    docs: dict[str | None, str] = {}
    class_doc = ast.get_docstring(class_def)
    if class_doc:
        docs[None] = class_doc

    previous: str | None = None
    for stmt in class_def.body:
        if (
            previous
            and isinstance(stmt, ast.Expr)
            and isinstance(stmt.value, ast.Constant)
            and isinstance(stmt.value.value, str)
        ):
            docs[previous] = inspect.cleandoc(stmt.value.value)
            previous = None
            continue
        previous = _assigned_name(stmt)
    return docs


def _assigned_name(stmt: ast.stmt) -> str | None:
    if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
        return stmt.target.id
    if isinstance(stmt, ast.Assign) and len(stmt.targets) == 1 and isinstance(stmt.targets[0], ast.Name):
        return stmt.targets[0].id
    return None


def _pydantic_description(owner: type, member: str) -> str | None:
    fields = getattr(owner, "model_fields", None)
    if not isinstance(fields, dict) or member not in fields:
        return None
    return fields[member].description


def first_line(comment: str | None) -> str | None:
    """Description of a class or method comment: its first non-blank line."""
    if not comment:
        return None
    for line in comment.strip().splitlines():
        if line.strip():
            return line.strip()
    return None
