"""Verifies that a generated swagger.json is in sync with a master document.

The master is treated as the new side, so "Added" means "add it to the application".
"""

import logging
from typing import Callable

from ..errors import SpecSyncDiffError, build_message
from .engine import DiffOption, SpecDiff
from .nodes import NodePredicate

logger = logging.getLogger(__name__)

SYNC_ADVICE = (
    "The application source code should be synchronized with your swagger.json.\n"
    "Your swagger.json is treated as master, so 'Added' means 'add it to the application'."
)


class SyncOption:
    def __init__(self):
        self.option_setuppers: list[Callable[[DiffOption], object]] = []
        self.logging_if_new_only = False

    def ignore_path_trailing_slash(self) -> "SyncOption":
        self.option_setuppers.append(lambda op: op.delete_path_trailing_slash())
        return self

    def target_node_and(self, predicate: NodePredicate) -> "SyncOption":
        self.option_setuppers.append(lambda op: op.target_node_and(predicate))
        return self

    def as_logging_if_new_only(self) -> "SyncOption":
        self.logging_if_new_only = True
        return self

    def create_diff_option(self) -> DiffOption:
        diff_option = DiffOption()
        for setupper in self.option_setuppers:
            setupper(diff_option)
        return diff_option


class SwaggerSyncVerifier:
    def verify(self, generated_location: str, master_location: str, option: SyncOption | None = None) -> None:
        """Raise SpecSyncDiffError unless the two documents have no differences."""
        option = option or SyncOption()
        differ = SpecDiff(option.create_diff_option())
        logger.debug("Verifying that %s is in sync with %s", generated_location, master_location)
        changes = differ.changes_from_locations(generated_location, master_location)
        if not changes.is_different():
            logger.info("The swagger is in sync with the master: %s", master_location)
            return

        message = build_message(
            "Found differences between your swagger.json and the application.",
            [("Advice", SYNC_ADVICE), ("Diff Result", differ.option.render.render(changes))],
        )
        if option.logging_if_new_only and changes.is_new_only():
            logger.info(message)
            return
        raise SpecSyncDiffError(message)


def verify_swagger_sync(generated_location: str, master_location: str, option: SyncOption | None = None) -> None:
    SwaggerSyncVerifier().verify(generated_location, master_location, option)
