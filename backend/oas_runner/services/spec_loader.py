"""
Load OpenAPI/Swagger specifications from a URL or raw content.
"""
import json
import logging
from typing import Any, Dict, Optional, Union

import httpx
import yaml

from oas_runner.core.config import settings
from oas_runner.core.exceptions import SpecificationError

logger = logging.getLogger(__name__)


def parse_spec_content(content: Union[str, bytes]) -> Dict[str, Any]:
    """Parse OpenAPI spec content (JSON or YAML)."""
    if not content:
        raise SpecificationError("Specification content is empty")

    # Try JSON first
    try:
        spec = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError):
        # Try YAML
        try:
            spec = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SpecificationError(f"Invalid YAML: {str(e)}")

    if not isinstance(spec, dict):
        raise SpecificationError("Specification must be a JSON/YAML object")
    return spec


def fetch_spec_from_url(url: str, timeout: Optional[float] = None) -> Dict[str, Any]:
    """Fetch and parse OpenAPI spec from URL."""
    if not url or not url.strip():
        raise SpecificationError("URL cannot be empty")

    url = url.strip()
    if not url.startswith(('http://', 'https://')):
        raise SpecificationError("URL must start with http:// or https://")

    timeout = timeout or settings.SPEC_FETCH_TIMEOUT
    logger.info(f"Fetching OpenAPI spec from URL: {url}")
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            response = client.get(url)
            response.raise_for_status()
    except httpx.TimeoutException:
        raise SpecificationError(f"Request timeout: URL did not respond within {timeout:g} seconds")
    except httpx.HTTPStatusError as e:
        raise SpecificationError(f"HTTP error {e.response.status_code}: Failed to fetch from URL")
    except httpx.RequestError as e:
        raise SpecificationError(f"Failed to fetch from URL: {str(e)}")

    if not response.content:
        raise SpecificationError("Empty response from URL")

    return parse_spec_content(response.content)
