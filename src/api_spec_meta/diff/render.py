"""Markdown rendering of a ChangedOpenApi tree.

    ### What's Added
    ---
    * `GET` /pets

    ### What's Changed
    ---
    ##### `GET` /pets/{petId}

    ###### Parameters:

    * `Added` limit in query
"""

from .model import (
    ChangedContent,
    ChangedMetadata,
    ChangedOpenApi,
    ChangedOperation,
    ChangedParameter,
    ChangedParameters,
    ChangedRequestBody,
    ChangedResponses,
    ChangedSchema,
    Operation,
    Parameter,
)

H3 = "### "
H5 = "##### "
H6 = "###### "
HR = "---\n"
LI = "* "
INDENT = "    "


def section_title(title: str) -> str:
    return f"{H3}{title}\n{HR}"


def item_endpoint(method: str, path: str) -> str:
    return f"`{method.upper()}` {path}"


def schema_type(schema: dict) -> str:
    if not schema:
        return "object"
    if "$ref" in schema:
        return schema["$ref"].rsplit("/", 1)[-1]
    type_ = schema.get("type", "object")
    if type_ == "array":
        return f"array<{schema_type(schema.get('items') or {})}>"
    if schema.get("format"):
        return f"{type_}({schema['format']})"
    return str(type_)


class MarkdownRender:
    """Renders the differences as a markdown report; no differences render as ``""``."""

    def render(self, diff: ChangedOpenApi) -> str:
        if not diff.is_different():
            return ""
        return (
            self.list_endpoints("What's Added", diff.new_endpoints)
            + self.list_endpoints("What's Deleted", diff.missing_endpoints)
            + self.list_changed(diff.changed_operations)
        )

    def list_endpoints(self, title: str, operations: list[Operation]) -> str:
        if not operations:
            return ""
        lines = [f"{LI}{item_endpoint(op.method, op.path)}" for op in operations]
        return section_title(title) + "\n".join(lines) + "\n\n"

    def list_changed(self, operations: list[ChangedOperation]) -> str:
        body = "".join(self.changed_operation(operation) for operation in operations)
        if not body:
            return ""
        return section_title("What's Changed") + body

    def changed_operation(self, operation: ChangedOperation) -> str:
        details = ""
        if operation.parameters is not None:
            details += f"{H6}Parameters:\n\n" + self.parameters(operation.parameters) + "\n"
        if operation.request_body is not None:
            details += f"{H6}Request:\n\n" + self.request_body(operation.request_body) + "\n"
        if operation.responses is not None:
            details += f"{H6}Return Type:\n\n" + self.responses(operation.responses) + "\n"
        if not details:
            return ""
        return f"{H5}{item_endpoint(operation.method, operation.path)}\n\n" + details

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def parameters(self, changed: ChangedParameters) -> str:
        text = "".join(self.item_parameter("Added", p) for p in changed.increased)
        text += "".join(self.item_parameter("Deleted", p) for p in changed.missing)
        text += "".join(self.changed_parameter(p) for p in changed.changed)
        return text

    def item_parameter(self, title: str, parameter: Parameter, detail: str | None = None) -> str:
        line = f"{LI}`{title}` {parameter.name} in {parameter.location}\n"
        if detail:
            line += f"{INDENT}> {detail}\n"
        return line

    def changed_parameter(self, changed: ChangedParameter) -> str:
        details = {
            "description": changed.description,
            "type": changed.param_type,
            "format": changed.format,
            "required": changed.required,
        }
        return self.item_parameter("Changed", changed.new_parameter, _metadata_text(details))

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------

    def request_body(self, changed: ChangedRequestBody) -> str:
        if changed.old_request_body is None:
            return f"{LI}`Added` request body\n"
        if changed.new_request_body is None:
            return f"{LI}`Deleted` request body\n"
        text = ""
        if changed.description is not None:
            text += _metadata_line("Description", changed.description)
        if changed.required is not None:
            text += _metadata_line("Required", changed.required)
        if changed.content is not None:
            text += self.content(changed.content, 0)
        return text

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def responses(self, changed: ChangedResponses) -> str:
        text = "".join(f"{LI}`New response` {status}\n" for status in changed.increased)
        text += "".join(f"{LI}`Deleted response` {status}\n" for status in changed.missing)
        for status, response in changed.changed.items():
            text += f"{LI}`Changed response` {status}\n"
            if response.description is not None:
                text += INDENT + _metadata_line("Description", response.description)
            if response.content is not None:
                text += self.content(response.content, 1)
        return text

    # ------------------------------------------------------------------
    # Content and schemas
    # ------------------------------------------------------------------

    def content(self, changed: ChangedContent, deepness: int) -> str:
        indent = INDENT * deepness
        text = "".join(f"{indent}{LI}`New media type` {media}\n" for media in changed.increased)
        text += "".join(f"{indent}{LI}`Deleted media type` {media}\n" for media in changed.missing)
        for media, schema in changed.changed.items():
            text += f"{indent}{LI}`Changed media type` {media}\n"
            text += self.schema(schema, deepness + 1)
        return text

    def schema(self, changed: ChangedSchema, deepness: int) -> str:
        indent = INDENT * deepness
        text = ""
        if changed.changed_type:
            text += f"{indent}{LI}`Changed type` {schema_type(changed.old_schema)} -> {schema_type(changed.new_schema)}\n"
        for title, metadata in (
            ("Description", changed.description),
            ("Format", changed.format),
            ("Enum", changed.enum),
            ("Required", changed.required),
        ):
            if metadata is not None:
                text += indent + LI + _metadata_line(title, metadata)
        for name, schema in changed.increased_properties.items():
            text += f"{indent}{LI}`Added property` {name} ({schema_type(schema)})\n"
        for name, schema in changed.missing_properties.items():
            text += f"{indent}{LI}`Deleted property` {name} ({schema_type(schema)})\n"
        for name, schema in changed.changed_properties.items():
            text += self.property(name, schema, deepness)
        if changed.items is not None:
            text += f"{indent}{LI}`Changed items` ({schema_type(changed.items.new_schema)})\n"
            text += self.schema(changed.items, deepness + 1)
        return text

    def property(self, name: str, changed: ChangedSchema, deepness: int) -> str:
        type_ = schema_type(changed.new_schema)
        if changed.changed_type:
            type_ = f"{schema_type(changed.old_schema)} -> {type_}"
        text = f"{INDENT * deepness}{LI}`Changed property` {name} ({type_})\n"
        nested = changed.model_copy(update={"changed_type": False})
        return text + self.schema(nested, deepness + 1)


def _metadata_line(title: str, metadata: ChangedMetadata) -> str:
    return f"{title}: `{metadata.left}` -> `{metadata.right}`\n"


def _metadata_text(details: dict[str, ChangedMetadata | None]) -> str | None:
    parts = [f"{key}: {m.left} -> {m.right}" for key, m in details.items() if m is not None]
    return ", ".join(parts) if parts else None
