"""
Operation enumeration for OpenAPI 2.0/3.x documents.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin

from pydantic import BaseModel, ConfigDict, ValidationError

from oas_runner.core.exceptions import SpecificationError
from oas_runner.services.schema_resolver import SchemaResolver

logger = logging.getLogger(__name__)

HTTP_METHODS = ['get', 'put', 'post', 'delete', 'options', 'head', 'patch', 'trace']

PATH_PARAM_PATTERN = re.compile(r'\{([^{}/]+)\}')


class EndpointDescriptor(BaseModel):
    """One (path, method) operation ready to be exercised."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: str
    operation_id: Optional[str] = None
    summary: str = ''
    request_body_schema: Optional[Dict[str, Any]] = None
    parameters: Tuple[Dict[str, Any], ...] = ()
    security: Optional[Tuple[Dict[str, Any], ...]] = None
    path_param_names: Tuple[str, ...] = ()


def extract_path_params(path: str) -> List[str]:
    """Names of {placeholders} in a path, in order of first appearance."""
    names: List[str] = []
    for name in PATH_PARAM_PATTERN.findall(path):
        if name not in names:
            names.append(name)
    return names


def _check_document(document: Any) -> Dict[str, Any]:
    if not isinstance(document, dict):
        raise SpecificationError("Specification must be a JSON/YAML object")
    paths = document.get('paths')
    if not isinstance(paths, dict):
        raise SpecificationError("Specification has no 'paths' object")
    return paths


class EndpointCatalog:
    """Extract endpoint descriptors from a parsed specification."""

    def __init__(self, document: Dict[str, Any]):
        """
        Initialize catalog.

        Args:
            document: Parsed OpenAPI/Swagger document

        Raises:
            SpecificationError: The document has no usable 'paths'
        """
        _check_document(document)
        self.document = document
        self.resolver = SchemaResolver(document)

    def extract(self, path: Optional[str] = None, method: Optional[str] = None) -> List[EndpointDescriptor]:
        """
        Build descriptors for every operation, or for a single one.

        Args:
            path: Restrict to this path
            method: Restrict to this method (requires path)

        Returns:
            Descriptors in document declaration order
        """
        paths = self.document['paths']

        if path is not None:
            if path not in paths:
                raise SpecificationError(f"Path {path} not found in specification")
            selected = {path: paths[path]}
        else:
            selected = paths

        wanted_method = method.lower() if method else None
        global_security = self.document.get('security')
        endpoints: List[EndpointDescriptor] = []

        for path_key, path_item in selected.items():
            path_item = self.resolver.deref(path_item)
            if not isinstance(path_item, dict):
                logger.warning(f"Skipping malformed path item: {path_key}")
                continue

            shared_params = path_item.get('parameters') or []

            for method_key, operation in path_item.items():
                if method_key.lower() not in HTTP_METHODS:
                    continue
                if wanted_method and method_key.lower() != wanted_method:
                    continue
                if not isinstance(operation, dict):
                    logger.warning(f"Skipping malformed operation: {method_key.upper()} {path_key}")
                    continue

                parameters = self._merge_parameters(shared_params, operation.get('parameters') or [])
                security = operation.get('security', global_security)

                operation_id = operation.get('operationId')
                try:
                    endpoints.append(EndpointDescriptor(
                        path=path_key,
                        method=method_key.upper(),
                        operation_id=str(operation_id) if operation_id is not None else None,
                        summary=str(operation.get('summary') or ''),
                        request_body_schema=self._request_body_schema(operation, parameters),
                        parameters=tuple(parameters),
                        security=tuple(security) if isinstance(security, list) else None,
                        path_param_names=tuple(extract_path_params(path_key)),
                    ))
                except ValidationError as e:
                    logger.warning(f"Skipping malformed operation: {method_key.upper()} {path_key}: {str(e)}")

        if wanted_method and not endpoints:
            raise SpecificationError(f"Method {method.upper()} not found for {path or 'any path'}")

        logger.info(f"Found {len(endpoints)} endpoints")
        return endpoints

    def _merge_parameters(self, shared: List[Any], own: List[Any]) -> List[Dict[str, Any]]:
        """Path-level parameters overridden by operation-level ones on (name, in)."""
        merged: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for raw in list(shared) + list(own):
            param = self.resolver.deref(raw)
            if not isinstance(param, dict):
                continue
            merged[(param.get('name', ''), param.get('in', ''))] = param
        return list(merged.values())

    def _request_body_schema(self, operation: Dict[str, Any], parameters: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        # OpenAPI 3.x
        request_body = self.resolver.deref(operation.get('requestBody'))
        if isinstance(request_body, dict):
            content = request_body.get('content') or {}
            if content:
                media_type = next((ct for ct in content if 'json' in ct.lower()), next(iter(content)))
                schema = (content.get(media_type) or {}).get('schema')
                if schema:
                    return schema
            if request_body.get('schema'):
                return request_body['schema']

        # Swagger 2.0
        for param in parameters:
            if param.get('in') == 'body' and param.get('schema'):
                return param['schema']

        return None

    def security_schemes(self) -> Dict[str, Any]:
        """Declared security schemes (components.securitySchemes or securityDefinitions)."""
        components = self.document.get('components') or {}
        return components.get('securitySchemes') or self.document.get('securityDefinitions') or {}

    def base_url(self, spec_url: Optional[str] = None) -> str:
        return base_url(self.document, spec_url)


def extract(
    document: Dict[str, Any],
    path: Optional[str] = None,
    method: Optional[str] = None,
) -> List[EndpointDescriptor]:
    """Operations of a document, optionally narrowed to one path and/or method."""
    return EndpointCatalog(document).extract(path=path, method=method)


def base_url(document: Dict[str, Any], spec_url: Optional[str] = None) -> str:
    """
    Work out where the described API lives.

    Args:
        document: Parsed specification
        spec_url: URL the specification was fetched from, used for relative server URLs

    Returns:
        Base URL without trailing slash, or '' when the document does not say
    """
    servers = document.get('servers') or []
    if servers and isinstance(servers[0], dict) and servers[0].get('url'):
        server = servers[0]
        url = server['url']
        for var_name, var in (server.get('variables') or {}).items():
            if isinstance(var, dict) and 'default' in var:
                url = url.replace(f'{{{var_name}}}', str(var['default']))
        if spec_url and not re.match(r'^[a-zA-Z][a-zA-Z0-9+.-]*://', url):
            url = urljoin(spec_url, url)
        return url.rstrip('/')

    host = document.get('host')
    if host:
        schemes = document.get('schemes') or ['https']
        return f"{schemes[0]}://{host}{document.get('basePath', '')}".rstrip('/')

    return ''
