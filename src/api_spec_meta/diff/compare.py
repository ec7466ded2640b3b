"""Structural comparison of two parsed spec documents."""

import copy
import logging

from .model import (
    ChangedContent,
    ChangedMetadata,
    ChangedOpenApi,
    ChangedOperation,
    ChangedParameter,
    ChangedParameters,
    ChangedRequestBody,
    ChangedResponse,
    ChangedResponses,
    ChangedSchema,
    Operation,
    Parameter,
    RequestBody,
    Response,
)

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

DEFAULT_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
ANY_MEDIA_TYPE = "*/*"


class RefResolver:
    """Inlines ``$ref`` schemas of one document; a ref already being inlined stays a ref."""

    def __init__(self, document: dict):
        self.document = document

    def lookup(self, ref: str) -> dict | None:
        if not ref.startswith("#/"):
            return None
        node = self.document
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, dict) else None

    def resolve(self, schema, seen: frozenset = frozenset()):
        if isinstance(schema, list):
            return [self.resolve(element, seen) for element in schema]
        if not isinstance(schema, dict):
            return schema
        ref = schema.get("$ref")
        if isinstance(ref, str):
            if ref in seen:
                return {"$ref": ref}
            target = self.lookup(ref)
            if target is None:
                logger.debug("Unresolved ref %s", ref)
                return dict(schema)
            return self.resolve(target, seen | {ref})
        return {key: self.resolve(value, seen) for key, value in schema.items()}


# ----------------------------------------------------------------------
# Normalization
# ----------------------------------------------------------------------


def normalize_operations(document: dict) -> dict[tuple[str, str], Operation]:
    """Operations of a Swagger 2.0 or OpenAPI 3 document keyed by (path, method)."""
    resolver = RefResolver(document)
    swagger2 = "swagger" in document
    operations = {}
    paths = document.get("paths")
    if not isinstance(paths, dict):
        logger.warning("The document has no 'paths' mapping")
        return operations

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        shared = path_item.get("parameters") or []
        for method, raw in path_item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(raw, dict):
                continue
            raw = resolver.resolve(raw)
            raw_parameters = _merge_parameters(resolver.resolve(shared), raw.get("parameters") or [])
            if swagger2:
                operation = _swagger2_operation(document, path, method.lower(), raw, raw_parameters)
            else:
                operation = _openapi3_operation(path, method.lower(), raw, raw_parameters)
            operations[operation.key] = operation
    return operations


def _merge_parameters(shared: list, own: list) -> list[dict]:
    merged: dict[tuple, dict] = {}
    for parameter in list(shared) + list(own):
        if isinstance(parameter, dict):
            merged[(parameter.get("name"), parameter.get("in"))] = parameter
    return list(merged.values())


def _plain_parameter(raw: dict) -> Parameter:
    schema = raw.get("schema") if isinstance(raw.get("schema"), dict) else raw
    return Parameter(
        name=str(raw.get("name", "")),
        location=str(raw.get("in", "query")),
        description=raw.get("description"),
        required=bool(raw.get("required", False)),
        param_type=schema.get("type"),
        format=schema.get("format"),
    )


def _swagger2_operation(document: dict, path: str, method: str, raw: dict, raw_parameters: list[dict]) -> Operation:
    consumes = raw.get("consumes") or document.get("consumes") or []
    produces = raw.get("produces") or document.get("produces") or []

    parameters = []
    request_body = None
    form_properties: dict[str, dict] = {}
    form_required: list[str] = []
    for parameter in raw_parameters:
        location = parameter.get("in")
        if location == "body":
            media_type = consumes[0] if consumes else DEFAULT_MEDIA_TYPE
            request_body = RequestBody(
                description=parameter.get("description"),
                required=bool(parameter.get("required", False)),
                content={media_type: parameter.get("schema") or {}},
            )
        elif location == "formData":
            schema = {k: v for k, v in parameter.items() if k not in ("name", "in", "required")}
            form_properties[str(parameter.get("name", ""))] = schema
            if parameter.get("required"):
                form_required.append(str(parameter.get("name", "")))
        else:
            parameters.append(_plain_parameter(parameter))

    if form_properties:
        media_type = consumes[0] if consumes else FORM_MEDIA_TYPE
        schema: dict = {"type": "object", "properties": form_properties}
        if form_required:
            schema["required"] = form_required
        request_body = RequestBody(required=bool(form_required), content={media_type: schema})

    responses = {}
    for status, raw_response in (raw.get("responses") or {}).items():
        if not isinstance(raw_response, dict):
            continue
        content = {}
        if "schema" in raw_response:
            for media_type in produces or [ANY_MEDIA_TYPE]:
                content[media_type] = raw_response["schema"]
        responses[str(status)] = Response(description=raw_response.get("description"), content=content)

    return Operation(
        method=method,
        path=path,
        summary=raw.get("summary"),
        parameters=parameters,
        request_body=request_body,
        responses=responses,
    )


def _openapi3_operation(path: str, method: str, raw: dict, raw_parameters: list[dict]) -> Operation:
    parameters = [_plain_parameter(p) for p in raw_parameters]

    request_body = None
    raw_body = raw.get("requestBody")
    if isinstance(raw_body, dict):
        request_body = RequestBody(
            description=raw_body.get("description"),
            required=bool(raw_body.get("required", False)),
            content=_media_schemas(raw_body.get("content")),
        )

    responses = {}
    for status, raw_response in (raw.get("responses") or {}).items():
        if isinstance(raw_response, dict):
            responses[str(status)] = Response(
                description=raw_response.get("description"),
                content=_media_schemas(raw_response.get("content")),
            )

    return Operation(
        method=method,
        path=path,
        summary=raw.get("summary"),
        parameters=parameters,
        request_body=request_body,
        responses=responses,
    )


def _media_schemas(content) -> dict[str, dict]:
    if not isinstance(content, dict):
        return {}
    return {
        media_type: (media.get("schema") or {}) if isinstance(media, dict) else {}
        for media_type, media in content.items()
    }


# ----------------------------------------------------------------------
# Comparison
# ----------------------------------------------------------------------


def compare_documents(left: dict, right: dict) -> ChangedOpenApi:
    """Differences from ``left`` (old) to ``right`` (new)."""
    old_operations = normalize_operations(left)
    new_operations = normalize_operations(right)

    result = ChangedOpenApi()
    for key, operation in new_operations.items():
        if key not in old_operations:
            result.new_endpoints.append(operation)
    for key, operation in old_operations.items():
        if key not in new_operations:
            result.missing_endpoints.append(operation)
            continue
        changed = compare_operation(operation, new_operations[key])
        if changed is not None:
            result.changed_operations.append(changed)
    logger.debug(
        "Compared: %d new, %d missing, %d changed",
        len(result.new_endpoints),
        len(result.missing_endpoints),
        len(result.changed_operations),
    )
    return result


def compare_operation(old: Operation, new: Operation) -> ChangedOperation | None:
    changed = ChangedOperation(
        method=new.method,
        path=new.path,
        summary=new.summary,
        parameters=compare_parameters(old.parameters, new.parameters),
        request_body=compare_request_body(old.request_body, new.request_body),
        responses=compare_responses(old.responses, new.responses),
    )
    return changed if changed.is_different() else None


def _metadata(left, right) -> ChangedMetadata | None:
    if left == right:
        return None
    return ChangedMetadata(
        left=None if left is None else str(left),
        right=None if right is None else str(right),
    )


def compare_parameters(old: list[Parameter], new: list[Parameter]) -> ChangedParameters | None:
    old_by_key = {p.key: p for p in old}
    new_by_key = {p.key: p for p in new}
    changed = ChangedParameters(
        increased=[p for key, p in new_by_key.items() if key not in old_by_key],
        missing=[p for key, p in old_by_key.items() if key not in new_by_key],
    )
    for key, old_parameter in old_by_key.items():
        new_parameter = new_by_key.get(key)
        if new_parameter is None:
            continue
        parameter = ChangedParameter(
            old_parameter=old_parameter,
            new_parameter=new_parameter,
            description=_metadata(old_parameter.description, new_parameter.description),
            param_type=_metadata(old_parameter.param_type, new_parameter.param_type),
            format=_metadata(old_parameter.format, new_parameter.format),
            required=_metadata(old_parameter.required, new_parameter.required),
        )
        if parameter.is_different():
            changed.changed.append(parameter)
    return changed if changed.is_different() else None


def compare_request_body(old: RequestBody | None, new: RequestBody | None) -> ChangedRequestBody | None:
    if old is None and new is None:
        return None
    changed = ChangedRequestBody(old_request_body=old, new_request_body=new)
    if old is not None and new is not None:
        changed.description = _metadata(old.description, new.description)
        changed.required = _metadata(old.required, new.required)
        changed.content = compare_content(old.content, new.content)
    return changed if changed.is_different() else None


def compare_responses(old: dict[str, Response], new: dict[str, Response]) -> ChangedResponses | None:
    changed = ChangedResponses(
        increased={status: r for status, r in new.items() if status not in old},
        missing={status: r for status, r in old.items() if status not in new},
    )
    for status, old_response in old.items():
        new_response = new.get(status)
        if new_response is None:
            continue
        response = ChangedResponse(
            old_response=old_response,
            new_response=new_response,
            description=_metadata(old_response.description, new_response.description),
            content=compare_content(old_response.content, new_response.content),
        )
        if response.is_different():
            changed.changed[status] = response
    return changed if changed.is_different() else None


def compare_content(old: dict[str, dict], new: dict[str, dict]) -> ChangedContent | None:
    changed = ChangedContent(
        increased={media: s for media, s in new.items() if media not in old},
        missing={media: s for media, s in old.items() if media not in new},
    )
    for media_type, old_schema in old.items():
        if media_type in new:
            schema = compare_schema(old_schema, new[media_type])
            if schema is not None:
                changed.changed[media_type] = schema
    return changed if changed.is_different() else None


def compare_schema(old: dict | None, new: dict | None) -> ChangedSchema | None:
    old = old if isinstance(old, dict) else {}
    new = new if isinstance(new, dict) else {}
    if old == new:
        return None

    changed = ChangedSchema(
        old_schema=copy.deepcopy(old),
        new_schema=copy.deepcopy(new),
        changed_type=old.get("type") != new.get("type") or old.get("$ref") != new.get("$ref"),
        description=_metadata(old.get("description"), new.get("description")),
        format=_metadata(old.get("format"), new.get("format")),
        enum=_metadata(old.get("enum"), new.get("enum")),
        required=_metadata(sorted(old.get("required") or []), sorted(new.get("required") or [])),
    )

    old_properties = old.get("properties") or {}
    new_properties = new.get("properties") or {}
    changed.increased_properties = {n: s for n, s in new_properties.items() if n not in old_properties}
    changed.missing_properties = {n: s for n, s in old_properties.items() if n not in new_properties}
    for name, old_property in old_properties.items():
        if name in new_properties:
            property_schema = compare_schema(old_property, new_properties[name])
            if property_schema is not None:
                changed.changed_properties[name] = property_schema

    if "items" in old or "items" in new:
        changed.items = compare_schema(old.get("items"), new.get("items"))
    return changed if changed.is_different() else None
