"""Reading spec documents from URLs, package resources and local files."""

import importlib.resources
import logging
from pathlib import Path

import httpx
import yaml

from ..errors import SpecDiffIOError, build_message

logger = logging.getLogger(__name__)

URL_MARKER = "://"

_DECODED = (("%24", "$"), ("%3C", "<"), ("%3E", ">"), ("%40", "@"))


def read_location(location: str, charset: str = "utf-8") -> str:
    """Text of a spec document.

    ``http://host/swagger.json`` is fetched, ``package:path/to.json`` is read as
    a package resource, anything else is a local path.
    """
    try:
        if URL_MARKER in location:
            logger.debug("Fetching %s", location)
            response = httpx.get(location, follow_redirects=True)
            response.raise_for_status()
            return response.content.decode(charset)
        resource = _read_resource(location, charset)
        if resource is not None:
            return resource
        return Path(location).read_text(encoding=charset)
    except (OSError, UnicodeDecodeError, httpx.HTTPError) as e:
        raise SpecDiffIOError(build_message("Failed to read location", [("Location", location)])) from e


def _read_resource(location: str, charset: str) -> str | None:
    if ":" not in location:
        return None
    package, _, name = location.partition(":")
    try:
        resource = importlib.resources.files(package).joinpath(name)
    except (ModuleNotFoundError, TypeError, ValueError):
        return None
    if not resource.is_file():
        return None
    return resource.read_text(encoding=charset)


def decode_content(content: str) -> str:
    """Undo the percent escapes that generators leave in refs, e.g. ``%3C`` => ``<``."""
    for escaped, literal in _DECODED:
        content = content.replace(escaped, literal)
    return content


def parse_content(content: str) -> dict:
    """Parse JSON or YAML text into a mapping."""
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SpecDiffIOError(build_message("Failed to parse the spec content", [("Content", content)])) from e
    if not isinstance(document, dict):
        raise SpecDiffIOError(build_message("The spec content is not a mapping", [("Content", content)]))
    return document
