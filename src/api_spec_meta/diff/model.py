"""Normalized operations and the change tree produced by comparing two documents.

Swagger 2.0 and OpenAPI 3 documents are both reduced to Operation models, so
the comparison never looks at the source version.
"""

from pydantic import BaseModel


class Parameter(BaseModel):
    """A non-body parameter, keyed by (name, location)."""

    name: str
    location: str  # query / path / header / cookie
    description: str | None = None
    required: bool = False
    param_type: str | None = None
    format: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.name, self.location


class RequestBody(BaseModel):
    description: str | None = None
    required: bool = False
    content: dict[str, dict] = {}  # media type => resolved schema


class Response(BaseModel):
    description: str | None = None
    content: dict[str, dict] = {}


class Operation(BaseModel):
    method: str
    path: str
    summary: str | None = None
    parameters: list[Parameter] = []
    request_body: RequestBody | None = None
    responses: dict[str, Response] = {}

    @property
    def key(self) -> tuple[str, str]:
        return self.path, self.method


class ChangedMetadata(BaseModel):
    left: str | None = None
    right: str | None = None


class ChangedSchema(BaseModel):
    old_schema: dict = {}
    new_schema: dict = {}
    changed_type: bool = False
    description: ChangedMetadata | None = None
    format: ChangedMetadata | None = None
    enum: ChangedMetadata | None = None
    required: ChangedMetadata | None = None
    increased_properties: dict[str, dict] = {}
    missing_properties: dict[str, dict] = {}
    changed_properties: dict[str, "ChangedSchema"] = {}
    items: "ChangedSchema | None" = None

    def is_different(self) -> bool:
        return bool(
            self.changed_type
            or self.description
            or self.format
            or self.enum
            or self.required
            or self.increased_properties
            or self.missing_properties
            or self.changed_properties
            or self.items
        )


class ChangedContent(BaseModel):
    increased: dict[str, dict] = {}
    missing: dict[str, dict] = {}
    changed: dict[str, ChangedSchema] = {}

    def is_different(self) -> bool:
        return bool(self.increased or self.missing or self.changed)


class ChangedParameter(BaseModel):
    old_parameter: Parameter
    new_parameter: Parameter
    description: ChangedMetadata | None = None
    param_type: ChangedMetadata | None = None
    format: ChangedMetadata | None = None
    required: ChangedMetadata | None = None

    def is_different(self) -> bool:
        return bool(self.description or self.param_type or self.format or self.required)


class ChangedParameters(BaseModel):
    increased: list[Parameter] = []
    missing: list[Parameter] = []
    changed: list[ChangedParameter] = []

    def is_different(self) -> bool:
        return bool(self.increased or self.missing or self.changed)


class ChangedRequestBody(BaseModel):
    old_request_body: RequestBody | None = None
    new_request_body: RequestBody | None = None
    description: ChangedMetadata | None = None
    required: ChangedMetadata | None = None
    content: ChangedContent | None = None

    def is_different(self) -> bool:
        if (self.old_request_body is None) != (self.new_request_body is None):
            return True
        return bool(self.description or self.required or self.content)


class ChangedResponse(BaseModel):
    old_response: Response
    new_response: Response
    description: ChangedMetadata | None = None
    content: ChangedContent | None = None

    def is_different(self) -> bool:
        return bool(self.description or self.content)


class ChangedResponses(BaseModel):
    increased: dict[str, Response] = {}
    missing: dict[str, Response] = {}
    changed: dict[str, ChangedResponse] = {}

    def is_different(self) -> bool:
        return bool(self.increased or self.missing or self.changed)


class ChangedOperation(BaseModel):
    method: str
    path: str
    summary: str | None = None
    parameters: ChangedParameters | None = None
    request_body: ChangedRequestBody | None = None
    responses: ChangedResponses | None = None

    def is_different(self) -> bool:
        return bool(self.parameters or self.request_body or self.responses)


class ChangedOpenApi(BaseModel):
    """Differences from the left (old) document to the right (new) one."""

    new_endpoints: list[Operation] = []
    missing_endpoints: list[Operation] = []
    changed_operations: list[ChangedOperation] = []

    def is_different(self) -> bool:
        return bool(self.new_endpoints or self.missing_endpoints or self.changed_operations)

    def is_new_only(self) -> bool:
        return bool(self.new_endpoints) and not self.missing_endpoints and not self.changed_operations


ChangedSchema.model_rebuild()
