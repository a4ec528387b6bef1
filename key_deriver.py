"""
Layer 2: Key Deriver

Purpose-bound key derivation on top of the HKDF engine: single keys,
keys combined from several sources, and families of keys separated by
their info string.
"""

from dataclasses import dataclass
from typing import Optional, Union
import logging

from config import HKDFConfig
from hkdf_engine import HashAlgorithm, HkdfEngine, HKDFError
from utils import constant_time_compare, generate_random_bytes, validate_key_material

logger = logging.getLogger(__name__)


@dataclass
class DerivationResult:
    """Result container for key derivation"""
    success: bool
    key: Optional[bytes] = None
    key_length: int = 0
    error: Optional[str] = None


class KeyDeriver:
    """
    HKDF-based key deriver.

    Wraps an HkdfEngine and reports failures as DerivationResult
    objects instead of raising.
    """

    def __init__(self, algorithm: Union[HashAlgorithm, str] = "hmacsha256",
                 info_prefix: str = "hkdf", min_key_length: int = 1):
        """
        Initialize key deriver.

        Args:
            algorithm: Hash algorithm for HKDF (default: SHA-256)
            info_prefix: Prefix of the per-purpose info string
            min_key_length: Shortest input keying material accepted, in bytes

        Raises:
            UnsupportedAlgorithm: if the algorithm is not recognized
        """
        self.engine = HkdfEngine(algorithm)
        self.info_prefix = info_prefix
        self.min_key_length = min_key_length
        logger.info(f"Initialized key deriver ({self.engine.algorithm.tag}, "
                    f"prefix={info_prefix!r})")

    @classmethod
    def from_config(cls, config: HKDFConfig) -> "KeyDeriver":
        """Build a deriver from an HKDFConfig"""
        return cls(config.hash_algorithm, info_prefix=config.info_prefix)

    def derive_key(self, ikm: bytes, output_length: int = 32,
                   salt: Optional[bytes] = None,
                   info: bytes = b"") -> DerivationResult:
        """
        Derive one key from input keying material.

        Args:
            ikm: Input keying material
            output_length: Desired key length in bytes
            salt: Optional salt value
            info: Context/application-specific info

        Returns:
            DerivationResult with the derived key
        """
        if not validate_key_material(ikm, min_length=self.min_key_length):
            return DerivationResult(
                success=False,
                error=(f"Input key material must be non-empty, at least "
                       f"{self.min_key_length} bytes and not all zeros")
            )

        if isinstance(output_length, int) and not isinstance(output_length, bool) \
                and output_length <= 0:
            logger.warning(f"Rejected derivation with output length {output_length}")
            return DerivationResult(
                success=False,
                error=f"Output length must be positive, got {output_length}"
            )

        try:
            key = self.engine.derive(ikm, salt=salt, info=info, length=output_length)
        except HKDFError as e:
            logger.error(f"Key derivation failed: {e}")
            return DerivationResult(success=False, error=str(e))

        logger.debug(f"Derived key: IKM({len(ikm)}B) -> {output_length}B")

        return DerivationResult(
            success=True,
            key=key,
            key_length=len(key)
        )

    def combine_keys(self, *key_parts: bytes, output_length: int = 32,
                     salt: Optional[bytes] = None,
                     info: Optional[bytes] = None) -> DerivationResult:
        """
        Combine several key sources into a single key.

        Args:
            *key_parts: Key material from each source, none empty or all zeros
            output_length: Desired key length in bytes
            salt: Optional salt value
            info: Context info (default: "<prefix>-combined")

        Returns:
            DerivationResult with the combined key
        """
        if not key_parts:
            return DerivationResult(success=False, error="No key parts given")

        for index, part in enumerate(key_parts):
            if not validate_key_material(part):
                return DerivationResult(
                    success=False,
                    error=f"Key part {index} must be non-empty and not all zeros"
                )

        if info is None:
            info = f"{self.info_prefix}-combined".encode()

        # Concatenate sources as input key material
        ikm = b"".join(key_parts)

        result = self.derive_key(ikm, output_length=output_length, salt=salt, info=info)
        if result.success:
            sizes = " + ".join(f"{len(p)}B" for p in key_parts)
            logger.info(f"Combined keys: {sizes} -> {output_length}B")
        return result

    def derive_multiple_keys(self, master_key: bytes,
                             purposes: list,
                             key_length: int = 32,
                             salt: Optional[bytes] = None) -> dict:
        """
        Derive purpose-specific keys from a master key.

        Args:
            master_key: Master key material
            purposes: Purpose strings (e.g., ["encryption", "authentication"])
            key_length: Length of each derived key
            salt: Optional salt

        Returns:
            Dictionary mapping purpose to derived key; failed purposes are omitted
        """
        derived_keys = {}

        for purpose in purposes:
            result = self.derive_key(
                master_key,
                output_length=key_length,
                salt=salt,
                info=self.purpose_info(purpose)
            )

            if result.success:
                derived_keys[purpose] = result.key
                logger.debug(f"Derived {purpose} key: {key_length} bytes")

        return derived_keys

    def generate_salt(self) -> bytes:
        """Random salt of HashLen bytes, the length RFC 5869 recommends"""
        return generate_random_bytes(self.engine.hash_len())

    def purpose_info(self, purpose: str) -> bytes:
        """Info string binding a derived key to its purpose"""
        return f"{self.info_prefix}-{purpose}".encode()

    def verify_key(self, ikm: bytes, expected: bytes,
                   salt: Optional[bytes] = None, info: bytes = b"") -> bool:
        """
        Re-derive a key and compare it with an expected value in constant time.

        Args:
            ikm: Input keying material
            expected: Previously derived key
            salt: Salt used for the original derivation
            info: Info used for the original derivation

        Returns:
            True if the re-derived key matches
        """
        if not expected:
            return False

        result = self.derive_key(ikm, output_length=len(expected), salt=salt, info=info)
        if not result.success:
            return False
        return constant_time_compare(result.key, expected)

    def get_statistics(self) -> dict:
        """Get deriver configuration"""
        return {
            "kdf": "HKDF",
            "hash_algorithm": self.engine.algorithm.tag,
            "hash_length": self.engine.hash_len(),
            "max_output_length": self.engine.max_output_length(),
            "info_prefix": self.info_prefix,
        }
