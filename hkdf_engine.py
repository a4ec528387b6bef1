"""
Layer 1: HKDF Engine

Implements HKDF (HMAC-based Extract-and-Expand Key Derivation Function,
RFC 5869) over a selectable hash algorithm.

HKDF(salt, IKM, info, L) = HKDF-Expand(HKDF-Extract(salt, IKM), info, L)

HMAC and the hash functions themselves come from the cryptography package;
this module only composes them.
"""

from enum import Enum
from typing import Optional, Union
from cryptography.hazmat.primitives import hashes, hmac
import logging

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


class HKDFError(Exception):
    """Base exception for HKDF failures"""
    pass


class UnsupportedAlgorithm(HKDFError, ValueError):
    """Raised when a hash algorithm identifier is not recognized"""
    pass


class OutputTooLarge(HKDFError, ValueError):
    """Raised when Expand would need more than 255 HMAC blocks"""
    pass


class InvalidLength(HKDFError, ValueError):
    """Raised for a negative output length"""
    pass


class HashAlgorithm(Enum):
    """Supported hash functions for HKDF"""
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @classmethod
    def from_name(cls, name: Union["HashAlgorithm", str]) -> "HashAlgorithm":
        """
        Resolve an algorithm from an enum member or string tag.

        Accepts "hmacsha256", "sha256", "SHA-256", "sha_256" and so on.

        Args:
            name: Algorithm member or identifier

        Returns:
            HashAlgorithm member

        Raises:
            UnsupportedAlgorithm: if the identifier is not recognized
        """
        if isinstance(name, cls):
            return name

        if isinstance(name, str):
            key = name.strip().lower().replace("-", "").replace("_", "")
            if key.startswith("hmac"):
                key = key[len("hmac"):]
            for member in cls:
                if member.value == key:
                    return member

        raise UnsupportedAlgorithm(f"Unsupported hash algorithm: {name!r}")

    @property
    def digest_size(self) -> int:
        """HashLen in bytes"""
        return _HASH_FACTORIES[self].digest_size

    @property
    def tag(self) -> str:
        """Identifier in hmac<hash> form"""
        return f"hmac{self.value}"


_HASH_FACTORIES = {
    HashAlgorithm.SHA1: hashes.SHA1,
    HashAlgorithm.SHA256: hashes.SHA256,
    HashAlgorithm.SHA384: hashes.SHA384,
    HashAlgorithm.SHA512: hashes.SHA512,
}


def _as_bytes(name: str, value: Optional[BytesLike]) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like, got {type(value).__name__}")
    return bytes(value)


class HkdfEngine:
    """
    HKDF over a single, fixed hash algorithm.

    The engine holds no mutable state: every call builds its own HMAC
    objects, so one instance can be shared across threads.
    """

    MAX_BLOCKS = 255

    def __init__(self, algorithm: Union[HashAlgorithm, str] = HashAlgorithm.SHA256):
        """
        Initialize HKDF engine.

        Args:
            algorithm: Hash algorithm member or identifier (default: SHA-256)

        Raises:
            UnsupportedAlgorithm: if the algorithm is not recognized
        """
        self.algorithm = HashAlgorithm.from_name(algorithm)
        self._hash_factory = _HASH_FACTORIES[self.algorithm]
        logger.info(f"Initialized HKDF engine with {self.algorithm.tag}")

    def __repr__(self) -> str:
        return f"HkdfEngine(algorithm={self.algorithm.tag!r})"

    def hash_len(self) -> int:
        """Digest length of the selected hash in bytes"""
        return self._hash_factory.digest_size

    def max_output_length(self) -> int:
        """Largest length Expand can produce"""
        return self.MAX_BLOCKS * self.hash_len()

    def new_hmac(self, key: bytes) -> hmac.HMAC:
        """Create a freshly keyed HMAC over the selected hash"""
        return hmac.HMAC(key, self._hash_factory())

    def extract(self, ikm: BytesLike, salt: Optional[BytesLike] = b"") -> bytes:
        """
        HKDF-Extract: PRK = HMAC-Hash(salt, IKM).

        Args:
            ikm: Input keying material
            salt: Optional salt; empty means HashLen zero bytes

        Returns:
            Pseudorandom key of exactly HashLen bytes
        """
        ikm = _as_bytes("ikm", ikm)
        salt = _as_bytes("salt", salt)

        if not salt:
            salt = bytes(self.hash_len())

        mac = self.new_hmac(salt)
        mac.update(ikm)
        return mac.finalize()

    def expand(self, prk: BytesLike, info: Optional[BytesLike] = b"",
               length: int = 32) -> bytes:
        """
        HKDF-Expand: OKM = first L bytes of T(1) || T(2) || ... || T(N).

        T(i) = HMAC-Hash(PRK, T(i-1) || info || i), with T(0) empty and
        i encoded as a single byte.

        Args:
            prk: Pseudorandom key (usually the output of extract)
            info: Optional context/application-specific info
            length: Output length in bytes; 0 yields b""

        Returns:
            Output keying material of exactly `length` bytes

        Raises:
            InvalidLength: if length is negative
            OutputTooLarge: if length needs more than 255 blocks
        """
        prk = _as_bytes("prk", prk)
        info = _as_bytes("info", info)

        if isinstance(length, bool) or not isinstance(length, int):
            raise TypeError(f"length must be int, got {type(length).__name__}")
        if length < 0:
            raise InvalidLength(f"Output length must be non-negative, got {length}")
        if length == 0:
            return b""

        hash_len = self.hash_len()
        n_blocks = -(-length // hash_len)
        if n_blocks > self.MAX_BLOCKS:
            raise OutputTooLarge(
                f"Requested {length} bytes needs {n_blocks} blocks; "
                f"{self.algorithm.tag} allows at most {self.max_output_length()} bytes"
            )

        okm = bytearray()
        block = b""
        for counter in range(1, n_blocks + 1):
            # finalize() makes each HMAC object single-use
            mac = self.new_hmac(prk)
            mac.update(block + info + bytes([counter]))
            block = mac.finalize()
            okm.extend(block)

        logger.debug(f"Expanded {n_blocks} block(s) -> {length}B ({self.algorithm.tag})")
        return bytes(okm[:length])

    def derive(self, ikm: BytesLike, salt: Optional[BytesLike] = b"",
               info: Optional[BytesLike] = b"", length: int = 32) -> bytes:
        """
        Full HKDF: extract then expand.

        Args:
            ikm: Input keying material
            salt: Optional salt
            info: Optional context info
            length: Output length in bytes

        Returns:
            Output keying material
        """
        prk = self.extract(ikm, salt)
        return self.expand(prk, info, length)
