"""Exception hierarchy and message building."""


def build_message(notice: str, items: list[tuple[str, object]]) -> str:
    """Build a multi-line error message.

    Each item is rendered as a ``[Title]`` line followed by its value.
    """
    lines = ["", "/* * * * * * * * * * * * * * * * * * * * * * * * * * * * * * * * *", notice]
    for title, value in items:
        lines.append("")
        lines.append(f"[{title}]")
        lines.append("" if value is None else str(value))
    lines.append("* * * * * * * * * */")
    return "\n".join(lines)


class ApiSpecMetaError(Exception):
    """Base class for all errors raised by api-spec-meta."""


class DefaultValueParseFailureError(ApiSpecMetaError):
    """The default value written in a comment cannot be parsed."""

    notice = "Failed to parse the default value in the comment."

    def __init__(self, property_name: str, property_type: str, comment: str | None, value: object):
        self.property_name = property_name
        self.property_type = property_type
        self.comment = comment
        self.value = value
        super().__init__(
            build_message(
                self.notice,
                [
                    ("Property Name", property_name),
                    ("Property Type", property_type),
                    ("Comment", comment),
                    ("Default Value", value),
                ],
            )
        )


class DefaultValueTypeConversionError(DefaultValueParseFailureError):
    """The default value was found but does not fit the declared type."""

    notice = "Failed to convert the default value in the comment to the property type."


class SpecDiffIOError(ApiSpecMetaError):
    """A spec document cannot be read or parsed."""


class SpecDiffFailureError(ApiSpecMetaError):
    """Diffing two spec documents failed."""


class SpecSyncDiffError(ApiSpecMetaError):
    """The generated spec is not in sync with the master spec."""
