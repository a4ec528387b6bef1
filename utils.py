"""
Utility Functions

Common utility functions for the HKDF package.
"""

import hmac
import secrets
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def generate_random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of bytes to generate

    Returns:
        Random bytes
    """
    return secrets.token_bytes(length)


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """Compare two byte sequences without leaking timing"""
    return hmac.compare_digest(a, b)


def validate_key_material(key: bytes, min_length: int = 1) -> bool:
    """
    Validate input keying material before derivation.

    Args:
        key: Key bytes to validate
        min_length: Minimum key length in bytes

    Returns:
        True if the key is non-empty, long enough and not all zeros
    """
    if not key:
        logger.warning("Key material is empty")
        return False

    if len(key) < min_length:
        logger.warning(f"Key material too short: {len(key)}B < {min_length}B")
        return False

    if not any(key):
        logger.warning(f"Key material is all zeros ({len(key)}B)")
        return False

    return True


def setup_logging(level: str = "INFO", log_file: Optional[str] = None,
                  force: bool = False) -> int:
    """
    Setup logging configuration.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        force: Replace handlers already installed on the root logger

    Returns:
        Numeric log level applied
    """
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=force
    )

    logger.info(f"Logging initialized at {logging.getLevelName(numeric_level)} level"
                + (f" (file: {log_file})" if log_file else ""))
    return numeric_level
