"""
HTTP transport used to probe the API under test.
"""
import logging
from typing import Any, Dict, Optional

import requests

from oas_runner.core.config import settings
from oas_runner.core.exceptions import TransportError

logger = logging.getLogger(__name__)

RESPONSE_BODY_LIMIT = 2000


def _decode_body(response: requests.Response) -> Any:
    """JSON body when the server sends one, otherwise (truncated) text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        text = response.text
        return text[:RESPONSE_BODY_LIMIT] if len(text) > RESPONSE_BODY_LIMIT else text


class HttpTransport:
    """Send a single request and report status and body."""

    def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        data: Any = None,
    ) -> Dict[str, Any]:
        """
        Issue a request.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers
            data: JSON body, omitted when None

        Returns:
            {'status': int, 'data': decoded body}

        Raises:
            TransportError: Network failure or non-2xx response
        """
        kwargs: Dict[str, Any] = {'headers': headers or {}, 'timeout': self.timeout}
        if data is not None:
            kwargs['json'] = data

        try:
            response = self.session.request(method.upper(), url, **kwargs)
        except requests.Timeout:
            raise TransportError(f"timeout of {self.timeout}s exceeded")
        except requests.RequestException as e:
            raise TransportError(str(e))

        body = _decode_body(response)
        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"Request failed with status code {response.status_code}",
                status=response.status_code,
                data=body,
            )

        return {'status': response.status_code, 'data': body}

    def close(self):
        self.session.close()
