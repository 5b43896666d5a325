"""
In-memory store of named auth configurations.
"""
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from cryptography.fernet import Fernet

from oas_runner.core.exceptions import AuthConfigError
from oas_runner.core.security import decrypt_data, encrypt_data, get_fernet
from oas_runner.services.auth_resolver import (
    API_KEY,
    BASIC,
    BEARER,
    CUSTOM,
    OAUTH2,
    normalize_auth_type,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    BEARER: ['token'],
    API_KEY: ['header', 'value'],
    BASIC: ['username', 'password'],
    OAUTH2: ['token'],
    CUSTOM: ['headers'],
}

PASSWORD_MASK = '********'


def validate_auth_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check that a config carries every field its type requires.

    Returns:
        A copy of the config with a normalized 'type'

    Raises:
        AuthConfigError: Unknown type or missing fields
    """
    if not isinstance(config, dict):
        raise AuthConfigError("Auth config must be an object")

    auth_type = normalize_auth_type(config.get('type'))
    if auth_type not in REQUIRED_FIELDS:
        raise AuthConfigError(f"Unsupported auth type: {config.get('type')}")

    missing = [field for field in REQUIRED_FIELDS[auth_type] if not config.get(field)]
    if missing:
        raise AuthConfigError(f"Auth type '{auth_type}' requires: {', '.join(missing)}")

    if auth_type == CUSTOM and not isinstance(config['headers'], dict):
        raise AuthConfigError("Custom auth 'headers' must be a mapping of header name to value")

    normalized = dict(config)
    normalized['type'] = auth_type
    return normalized


def mask_secret(value: Any) -> str:
    """Show only the first four characters of a secret."""
    text = str(value or '')
    return f"{text[:4]}..."


def mask_auth_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of the config that is safe to show to users."""
    masked = dict(config)
    for field in ('token', 'value'):
        if masked.get(field):
            masked[field] = mask_secret(masked[field])
    if masked.get('password'):
        masked['password'] = PASSWORD_MASK
    if isinstance(masked.get('headers'), dict):
        masked['headers'] = {name: mask_secret(value) for name, value in masked['headers'].items()}
    return masked


class AuthConfigStore:
    """
    Named auth configurations for the lifetime of the process.

    Configs are encrypted while at rest in memory and are only handed
    out unmasked through reveal(), which the executor uses to build
    request headers.
    """

    def __init__(self, fernet: Optional[Fernet] = None):
        self._fernet = fernet or get_fernet()
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def save(self, name: str, config: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and store a config under a name, replacing any previous one."""
        if not name or not str(name).strip():
            raise AuthConfigError("Auth config name is required")
        name = str(name).strip()
        normalized = validate_auth_config(config)

        entry = {
            'type': normalized['type'],
            'secret': encrypt_data(json.dumps(normalized), self._fernet),
            'updated_at': datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            self._entries[name] = entry
        logger.info(f"Saved auth config '{name}' ({normalized['type']})")
        return self._present(name, normalized, entry)

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        """Masked config, or None if no config has that name."""
        with self._lock:
            entry = self._entries.get(name)
        if entry is None:
            return None
        return self._present(name, self._decrypt(entry), entry)

    def list(self) -> List[Dict[str, Any]]:
        """All masked configs, in insertion order."""
        with self._lock:
            entries = list(self._entries.items())
        return [self._present(name, self._decrypt(entry), entry) for name, entry in entries]

    def delete(self, name: str) -> bool:
        with self._lock:
            removed = self._entries.pop(name, None)
        if removed is not None:
            logger.info(f"Deleted auth config '{name}'")
        return removed is not None

    def reveal(self, name: str) -> Optional[Dict[str, Any]]:
        """Unmasked copy of a config for building request headers."""
        with self._lock:
            entry = self._entries.get(name)
        if entry is None:
            return None
        return self._decrypt(entry)

    def _decrypt(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        return json.loads(decrypt_data(entry['secret'], self._fernet))

    @staticmethod
    def _present(name: str, config: Dict[str, Any], entry: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'name': name,
            'config': mask_auth_config(config),
            'updated_at': entry['updated_at'],
        }
