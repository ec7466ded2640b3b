"""Node targeting and path filtering applied to parsed documents before comparison."""

import logging
import re
from typing import Callable

logger = logging.getLogger(__name__)

NodePredicate = Callable[[str, str], bool]

IGNORED_FIELDS = ("summary", "description", "examples")

_RESPONSE_CODE_PATH = re.compile(r".+\.responses\.[^.]+$")
_SUCCESS_CODE = re.compile(r"2\d\d")


def default_target_node(path: str, name: str) -> bool:
    """Skip prose fields and every response other than 2xx."""
    if name in IGNORED_FIELDS:
        return False
    if _RESPONSE_CODE_PATH.match(path):
        return bool(_SUCCESS_CODE.fullmatch(name))
    return True


def target_nodes(node, predicate: NodePredicate, path: str = "") -> None:
    """Remove, in place, every field the predicate rejects.

    Paths are dotted field names, e.g. ``paths./pets.get.responses.200``.
    Array elements share the path of the array.
    """
    if isinstance(node, list):
        for element in node:
            target_nodes(element, predicate, path)
    elif isinstance(node, dict):
        for name in list(node):
            field_path = f"{path}.{name}" if path else str(name)
            if predicate(field_path, str(name)):
                target_nodes(node[name], predicate, field_path)
            else:
                del node[name]


class PathFilter:
    """Path-level filters, all off by default."""

    def __init__(self):
        self.trailing_slash_deleted = False
        self.excepted_prefixes: list[str] = []
        self.excepted_content_types: list[str] = []

    def delete_path_trailing_slash(self) -> "PathFilter":
        self.trailing_slash_deleted = True
        return self

    def except_path_by_prefix(self, prefix: str) -> "PathFilter":
        self.excepted_prefixes.append(prefix)
        return self

    def except_path_by_response_content_type(self, content_type: str) -> "PathFilter":
        self.excepted_content_types.append(content_type)
        return self

    def needs_filtering(self) -> bool:
        return self.trailing_slash_deleted or bool(self.excepted_prefixes) or bool(self.excepted_content_types)

    def filter_paths(self, document: dict) -> None:
        if not self.needs_filtering():
            return
        paths = document.get("paths")
        if not isinstance(paths, dict):
            logger.debug("No 'paths' mapping to filter: %r", paths)
            return

        if self.trailing_slash_deleted:
            renamed = {_strip_trailing_slash(path): item for path, item in paths.items()}
            paths.clear()
            paths.update(renamed)

        for path in list(paths):
            if any(path.startswith(prefix) for prefix in self.excepted_prefixes):
                del paths[path]
            elif self.has_excepted_content_type(paths[path]):
                del paths[path]

    def has_excepted_content_type(self, node) -> bool:
        """True when a nested ``responses`` content or ``produces`` list names an excepted type."""
        if isinstance(node, list):
            return any(self.has_excepted_content_type(element) for element in node)
        if not isinstance(node, dict):
            return False
        responses = node.get("responses")
        if isinstance(responses, dict):
            for response in responses.values():
                content = response.get("content") if isinstance(response, dict) else None
                if isinstance(content, dict) and any(ct in content for ct in self.excepted_content_types):
                    return True
        produces = node.get("produces")
        if isinstance(produces, list) and any(ct in produces for ct in self.excepted_content_types):
            return True
        return any(self.has_excepted_content_type(value) for value in node.values())


def _strip_trailing_slash(path: str) -> str:
    if path == "/" or not path.endswith("/"):
        return path
    return path.rstrip("/") or "/"
