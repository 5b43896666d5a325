"""
Authentication header resolution for outgoing test requests.
"""
import base64
import logging
from typing import Any, Dict, List, Optional, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from oas_runner.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

BEARER = 'bearer'
API_KEY = 'apikey'
BASIC = 'basic'
OAUTH2 = 'oauth2'
CUSTOM = 'custom'

# Aliases accepted for the explicit config "type" tag
_TYPE_ALIASES = {
    'bearer': BEARER,
    'apikey': API_KEY,
    'api_key': API_KEY,
    'api-key': API_KEY,
    'basic': BASIC,
    'oauth2': OAUTH2,
    'oauth': OAUTH2,
    'custom': CUSTOM,
}


def normalize_auth_type(auth_type: Optional[str]) -> str:
    """Map a user supplied auth type onto one of the known tags."""
    lowered = (auth_type or BEARER).strip().lower()
    return _TYPE_ALIASES.get(lowered, lowered)


def _basic_header(username: str, password: str) -> str:
    encoded = base64.b64encode(f"{username}:{password}".encode()).decode()
    return f"Basic {encoded}"


def _with_query_param(url: str, name: str, value: str) -> str:
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.append((name, value))
    return urlunsplit(parts._replace(query=urlencode(query)))


class AuthResolver:
    """
    Decide which authentication headers an outgoing request carries.

    Precedence is strict: an explicit auth config wins, then the first
    satisfiable security requirement declared by the OpenAPI document, then
    no authentication at all. Missing credentials never abort a request,
    they are replaced by environment defaults and a warning is logged.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def apply(
        self,
        request_config: Dict[str, Any],
        security_requirements: Optional[Union[List[Dict[str, Any]], Dict[str, Any]]] = None,
        auth_config: Optional[Dict[str, Any]] = None,
        security_schemes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Populate request headers with authentication material.

        Args:
            request_config: Request dict; its 'headers' mapping is created if missing
            security_requirements: Operation security (list of OR alternatives)
            auth_config: Explicit auth configuration supplied by the caller
            security_schemes: Declared schemes (components.securitySchemes / securityDefinitions)

        Returns:
            The same request dict
        """
        if request_config is None:
            request_config = {}
        if request_config.get('headers') is None:
            request_config['headers'] = {}

        # Priority 1: explicit auth config
        if auth_config:
            self._apply_auth_config(request_config['headers'], auth_config)
            return request_config

        # Priority 2: security requirements declared by the document
        if security_requirements:
            self._apply_security_requirements(
                request_config, security_requirements, security_schemes or {}
            )
            return request_config

        # Priority 3: unauthenticated
        logger.debug("No authentication configured for this request")
        return request_config

    def _apply_auth_config(self, headers: Dict[str, str], auth_config: Dict[str, Any]):
        env = self.settings
        auth_type = normalize_auth_type(auth_config.get('type'))

        if auth_type == BEARER:
            header = auth_config.get('header') or 'Authorization'
            token = auth_config.get('token')
            if not token:
                logger.warning("Bearer token is missing, using default or environment variable")
                token = env.DEFAULT_BEARER_TOKEN or 'TOKEN_MISSING'
            headers[header] = f"Bearer {token}"

        elif auth_type == API_KEY:
            header = auth_config.get('header') or 'X-API-Key'
            value = auth_config.get('value')
            if not value:
                logger.warning("API key value is missing, using default or environment variable")
                value = env.API_KEY or 'API_KEY_MISSING'
            headers[header] = value

        elif auth_type == BASIC:
            username = auth_config.get('username')
            password = auth_config.get('password')
            if not username or not password:
                logger.warning("Basic auth credentials are incomplete, using environment variables")
                username = username or env.BASIC_AUTH_USER or 'missing_username'
                password = password or env.BASIC_AUTH_PASS or 'missing_password'
            headers['Authorization'] = _basic_header(username, password)

        elif auth_type == OAUTH2:
            token = auth_config.get('token')
            if not token:
                logger.warning("OAuth2 token is missing, using default or environment variable")
                token = env.OAUTH_TOKEN or env.DEFAULT_AUTH_VALUE or 'OAUTH_TOKEN_MISSING'
            headers['Authorization'] = f"Bearer {token}"

        elif auth_type == CUSTOM:
            custom_headers = auth_config.get('headers') or {}
            if not custom_headers:
                logger.warning("Custom headers are missing")
            for name, value in custom_headers.items():
                headers[name] = str(value)

        else:
            logger.warning(f"Unknown auth type: {auth_type}, using default authorization if available")
            if env.DEFAULT_AUTH_KEY and env.DEFAULT_AUTH_VALUE:
                headers[env.DEFAULT_AUTH_KEY] = env.DEFAULT_AUTH_VALUE

    def _apply_security_requirements(
        self,
        request_config: Dict[str, Any],
        security_requirements: Union[List[Dict[str, Any]], Dict[str, Any]],
        security_schemes: Dict[str, Any],
    ):
        env = self.settings
        headers = request_config['headers']

        # A bare mapping (global security in some documents) gets the default header
        if isinstance(security_requirements, dict):
            header = env.DEFAULT_AUTH_KEY or 'Authorization'
            headers[header] = env.DEFAULT_AUTH_VALUE or 'Bearer YOUR_TOKEN_HERE'
            return

        for requirement in security_requirements:
            # {} means "authentication optional"
            if not isinstance(requirement, dict) or not requirement:
                continue

            scheme_name = next(iter(requirement))
            scheme_kind = self.classify_scheme(scheme_name, security_schemes.get(scheme_name))

            if scheme_kind == BEARER:
                token = env.BEARER_TOKEN or env.DEFAULT_AUTH_VALUE or 'YOUR_TOKEN_HERE'
                headers['Authorization'] = f"Bearer {token}"
                return

            if scheme_kind == API_KEY:
                declared = security_schemes.get(scheme_name) or {}
                self._apply_api_key(request_config, declared, env.API_KEY or 'YOUR_API_KEY')
                return

            if scheme_kind == BASIC:
                username = env.BASIC_AUTH_USER or 'missing_username'
                password = env.BASIC_AUTH_PASS or 'missing_password'
                headers['Authorization'] = _basic_header(username, password)
                return

            if scheme_kind == OAUTH2:
                token = env.OAUTH_TOKEN or env.DEFAULT_AUTH_VALUE or 'YOUR_TOKEN_HERE'
                headers['Authorization'] = f"Bearer {token}"
                return

        logger.warning("Could not satisfy any security requirements")

    def _apply_api_key(self, request_config: Dict[str, Any], declared: Dict[str, Any], value: str):
        """Deliver an API key where the scheme declares it: header, query or cookie."""
        env = self.settings
        headers = request_config['headers']
        if not isinstance(declared, dict):
            declared = {}
        name = declared.get('name')
        location = str(declared.get('in') or 'header').lower()

        if name and location == 'query':
            if request_config.get('url'):
                request_config['url'] = _with_query_param(request_config['url'], name, value)
                return
            logger.warning(f"No URL to carry query API key '{name}', sending it as a header")
        elif name and location == 'cookie':
            cookie = f"{name}={value}"
            headers['Cookie'] = f"{headers['Cookie']}; {cookie}" if headers.get('Cookie') else cookie
            return

        header = env.API_KEY_HEADER or env.DEFAULT_AUTH_KEY or 'X-API-Key'
        if location == 'header' and name:
            header = name
        headers[header] = value

    @staticmethod
    def classify_scheme(scheme_name: str, declared: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """
        Work out which kind of credential a security scheme expects.

        The declared scheme object wins when present; otherwise the scheme
        name is matched against well-known substrings.
        """
        if isinstance(declared, dict) and declared.get('type'):
            declared_type = str(declared['type']).lower()
            if declared_type == 'http':
                http_scheme = str(declared.get('scheme', '')).lower()
                if http_scheme == 'bearer':
                    return BEARER
                if http_scheme == 'basic':
                    return BASIC
            elif declared_type == 'apikey':
                return API_KEY
            elif declared_type == 'basic':
                return BASIC
            elif declared_type in ('oauth2', 'openidconnect'):
                return OAUTH2

        lowered = (scheme_name or '').lower()
        if 'bearer' in lowered:
            return BEARER
        if 'apikey' in lowered or 'api_key' in lowered or 'api-key' in lowered:
            return API_KEY
        if 'basic' in lowered:
            return BASIC
        if 'oauth' in lowered:
            return OAUTH2
        return None
