"""Spec diff engine: load, filter, compare and render two documents."""

import json
import logging
from typing import Callable

from ..config import get_settings
from ..errors import SpecDiffFailureError, SpecDiffIOError, build_message
from .compare import compare_documents
from .loader import decode_content, parse_content, read_location
from .model import ChangedOpenApi
from .nodes import NodePredicate, PathFilter, default_target_node, target_nodes
from .render import MarkdownRender

logger = logging.getLogger(__name__)

ContentFilter = Callable[[str], str]


class DiffOption:
    """Options of one diff run; every setter returns the option for chaining."""

    def __init__(self, charset: str | None = None):
        self.charset = charset or get_settings().content_charset
        self.render = MarkdownRender()
        self.left_content_filter: ContentFilter | None = None
        self.right_content_filter: ContentFilter | None = None
        self.target_node: NodePredicate = default_target_node
        self.path_filter = PathFilter()

    def filter_left_content(self, content_filter: ContentFilter) -> "DiffOption":
        self.left_content_filter = content_filter
        return self

    def filter_right_content(self, content_filter: ContentFilter) -> "DiffOption":
        self.right_content_filter = content_filter
        return self

    def derive_target_node(self, predicate: NodePredicate) -> "DiffOption":
        """Replace the node predicate, default included."""
        self.target_node = predicate
        return self

    def target_node_and(self, predicate: NodePredicate) -> "DiffOption":
        current = self.target_node
        self.target_node = lambda path, name: current(path, name) and predicate(path, name)
        return self

    def delete_path_trailing_slash(self) -> "DiffOption":
        self.path_filter.delete_path_trailing_slash()
        return self

    def except_path_by_prefix(self, prefix: str) -> "DiffOption":
        self.path_filter.except_path_by_prefix(prefix)
        return self

    def except_path_by_response_content_type(self, content_type: str) -> "DiffOption":
        self.path_filter.except_path_by_response_content_type(content_type)
        return self


class SpecDiff:
    def __init__(self, option: DiffOption | None = None):
        self.option = option or DiffOption()

    def diff_from_locations(self, left_location: str, right_location: str) -> str:
        """Markdown report of the differences; ``""`` when there are none."""
        try:
            return self.option.render.render(self.changes_from_locations(left_location, right_location))
        except Exception as e:
            raise SpecDiffFailureError(
                build_message(
                    "Failed to diff the spec files.",
                    [("Left Location", left_location), ("Right Location", right_location)],
                )
            ) from e

    def diff_from_contents(self, left_content: str, right_content: str) -> str:
        return self.option.render.render(self.changes_from_contents(left_content, right_content))

    def changes_from_locations(self, left_location: str, right_location: str) -> ChangedOpenApi:
        try:
            left_content = read_location(left_location, self.option.charset)
            right_content = read_location(right_location, self.option.charset)
        except SpecDiffIOError as e:
            raise SpecDiffIOError(
                build_message(
                    "Failed to read the spec file.",
                    [("Left Location", left_location), ("Right Location", right_location)],
                )
            ) from e
        return self.changes_from_contents(left_content, right_content)

    def changes_from_contents(self, left_content: str, right_content: str) -> ChangedOpenApi:
        try:
            left = self.load(left_content, self.option.left_content_filter)
            right = self.load(right_content, self.option.right_content_filter)
        except SpecDiffIOError as e:
            raise SpecDiffIOError(
                build_message(
                    "Failed to load the spec contents.",
                    [("Left Content", left_content), ("Right Content", right_content)],
                )
            ) from e
        return self.compare(left, right)

    def load(self, content: str, content_filter: ContentFilter | None = None) -> dict:
        """Decode, parse and target nodes, then run the content filter over the
        targeted JSON and filter paths last."""
        document = parse_content(decode_content(content))
        target_nodes(document, self.option.target_node)
        if content_filter is not None:
            document = parse_content(content_filter(json.dumps(document, ensure_ascii=False, default=str)))
        self.option.path_filter.filter_paths(document)
        return document

    def compare(self, left: dict, right: dict) -> ChangedOpenApi:
        return compare_documents(left, right)


def diff_from_locations(left_location: str, right_location: str, option: DiffOption | None = None) -> str:
    return SpecDiff(option).diff_from_locations(left_location, right_location)
