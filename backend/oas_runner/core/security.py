"""
Encryption helpers for secret material kept in memory.
"""
import logging

from cryptography.fernet import Fernet, InvalidToken

from oas_runner.core.config import settings

logger = logging.getLogger(__name__)


def get_fernet() -> Fernet:
    """Get or create Fernet instance for encryption."""
    key = settings.ENCRYPTION_KEY.encode()
    if len(key) != 44:  # Fernet keys are 44 bytes when base64 encoded
        key = Fernet.generate_key()
        settings.ENCRYPTION_KEY = key.decode()
    try:
        return Fernet(key)
    except ValueError:
        key = Fernet.generate_key()
        settings.ENCRYPTION_KEY = key.decode()
        return Fernet(key)


def encrypt_data(data: str, fernet: Fernet = None) -> str:
    """Encrypt sensitive data."""
    f = fernet or get_fernet()
    return f.encrypt(data.encode()).decode()


def decrypt_data(encrypted_data: str, fernet: Fernet = None) -> str:
    """Decrypt sensitive data."""
    if not encrypted_data:
        raise ValueError("No encrypted data provided")

    f = fernet or get_fernet()
    try:
        return f.decrypt(encrypted_data.encode()).decode()
    except InvalidToken:
        logger.error("Decryption failed: InvalidToken")
        raise ValueError(
            "Encrypted data is invalid or corrupted. This usually happens when the encryption key has changed. "
            "Please re-save the auth configuration."
        )
