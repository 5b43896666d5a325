"""
Specification test run and retry endpoints.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field

from oas_runner.api.deps import get_auth_store, get_transport
from oas_runner.api.v1.endpoints.auth_configs import AuthConfigIn
from oas_runner.core.exceptions import SpecificationError
from oas_runner.services.auth_store import AuthConfigStore
from oas_runner.services.result_aggregator import summarize
from oas_runner.services.spec_loader import fetch_spec_from_url, parse_spec_content
from oas_runner.services.test_executor import TestExecutor, retry_request

logger = logging.getLogger(__name__)

router = APIRouter()


class OASTestRequest(BaseModel):
    """Request model for a specification test run."""
    oas_url: Optional[str] = Field(None, description="URL of the OpenAPI/Swagger document")
    spec: Optional[Dict[str, Any]] = Field(None, description="Already parsed specification")
    spec_content: Optional[str] = Field(None, description="Raw JSON or YAML specification")
    base_url: Optional[str] = Field(None, description="Override the base URL declared by the document")
    path: Optional[str] = Field(None, description="Only test this path")
    method: Optional[str] = Field(None, description="Only test this method")
    auth_config: Optional[AuthConfigIn] = None
    auth_config_name: Optional[str] = Field(None, description="Name of a stored auth configuration")


class RetryRequest(BaseModel):
    """Request model for retrying a single recorded request."""
    url: str
    method: str
    data: Optional[Any] = None
    headers: Optional[Dict[str, str]] = None
    endpoint: Optional[str] = Field(None, description="Path template of the retried operation")
    auth_config: Optional[AuthConfigIn] = None
    auth_config_name: Optional[str] = None
    results: Optional[List[Dict[str, Any]]] = Field(None, description="Result set to update")


def _resolve_auth(
    auth_config: Optional[AuthConfigIn],
    auth_config_name: Optional[str],
    store: AuthConfigStore,
) -> Optional[Dict[str, Any]]:
    if auth_config is not None:
        return auth_config.as_config()
    if auth_config_name:
        config = store.reveal(auth_config_name)
        if config is None:
            raise HTTPException(status_code=404, detail=f"Auth config '{auth_config_name}' not found")
        return config
    return None


def _load_spec(request: OASTestRequest) -> Dict[str, Any]:
    if request.spec is not None:
        return request.spec
    if request.spec_content:
        return parse_spec_content(request.spec_content)
    if request.oas_url:
        return fetch_spec_from_url(request.oas_url)
    raise SpecificationError("One of oas_url, spec or spec_content is required")


@router.post("/test")
def test_oas(
    request: OASTestRequest = Body(...),
    store: AuthConfigStore = Depends(get_auth_store),
    transport=Depends(get_transport),
):
    """
    Test every operation of an OpenAPI specification.

    Returns:
        Summary and per-endpoint results
    """
    auth_config = _resolve_auth(request.auth_config, request.auth_config_name, store)

    try:
        spec = _load_spec(request)
        executor = TestExecutor(
            spec,
            transport=transport,
            base_url=request.base_url,
            spec_url=request.oas_url,
        )
        return executor.run(auth_config=auth_config, path=request.path, method=request.method)
    except SpecificationError as e:
        logger.error(f"Error processing OAS: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/retry")
def retry_endpoint(
    request: RetryRequest = Body(...),
    store: AuthConfigStore = Depends(get_auth_store),
    transport=Depends(get_transport),
):
    """Retry a single endpoint with a previously recorded request."""
    auth_config = _resolve_auth(request.auth_config, request.auth_config_name, store)
    results = list(request.results) if request.results is not None else None

    result = retry_request(
        transport,
        {
            'url': request.url,
            'method': request.method,
            'data': request.data,
            'headers': request.headers or {},
        },
        endpoint=request.endpoint,
        auth_config=auth_config,
        results=results,
    )

    summary_source = results if results is not None else [result]
    return {
        "result": result,
        "results": results,
        "summary": summarize(summary_source),
    }
