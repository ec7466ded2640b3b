"""Endpoint analysis: declared descriptors to analyzed Endpoint models."""

import logging

from .base import Endpoint, EndpointDescriptor, ScalarType
from .docs import first_line
from .responses import unwrap_response
from .walker import TypeGraphWalker

logger = logging.getLogger(__name__)

ROOT_TAG = "root"


def tag_of(url: str, root: bool = False) -> str:
    """First path segment of the URL, or the root tag."""
    segment = url.strip("/").split("/", 1)[0]
    if root or not segment:
        return ROOT_TAG
    return segment


class EndpointAnalyzer:
    def __init__(self, walker: TypeGraphWalker | None = None):
        self.walker = walker or TypeGraphWalker()

    def analyze(self, descriptor: EndpointDescriptor) -> Endpoint:
        logger.debug("Analyzing endpoint %s (%s)", descriptor.url, descriptor.method_name)
        path_parameters = [self.walker.analyze_parameter(name, annotation) for name, annotation in descriptor.path_parameters]
        request_form = None
        if descriptor.form_type is not None:
            request_form = self.walker.analyze_form(descriptor.form_type)

        response = self.walker.analyze_return(descriptor.response_type)
        target, kind = unwrap_response(descriptor.response_type)
        if kind == "plain" and not isinstance(response.declared_type, ScalarType):
            kind = "json"
        if target is None and kind in ("json", "xml"):
            logger.debug("Response of %s has no body type", descriptor.url)

        return Endpoint(
            url=descriptor.url,
            method_name=descriptor.method_name,
            http_method=descriptor.http_method,
            tag=tag_of(descriptor.url, descriptor.root),
            description=first_line(descriptor.doc) or first_line(descriptor.type_doc),
            method_comment=descriptor.doc,
            path_parameters=path_parameters,
            request_form=request_form,
            response=response,
            response_kind=kind,
            success_status=descriptor.success_status,
            success_description=descriptor.success_description,
            failure_status_map=dict(descriptor.failure_statuses),
            descriptor=descriptor,
        )

    def analyze_all(self, descriptors: list[EndpointDescriptor]) -> list[Endpoint]:
        return [self.analyze(d) for d in descriptors]
