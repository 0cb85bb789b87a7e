"""
Shared Secret Module

Turns the ECDH x-coordinate into an AES-256-GCM key and uses it for
authenticated encryption of channel traffic.

Payload format:
    [nonce (12 bytes) | ciphertext | tag (16 bytes)]

No length prefix, no associated data, no version tag.

Key derivation:
- DECIMAL_PREFIX: first 32 characters of the decimal rendering of x.
  Wire-compatible with existing peers, but weak: the key alphabet is
  only the ten ASCII digits.
- HKDF_SHA256: HKDF over the fixed-width big-endian x. A separate
  protocol version; the two never interoperate.
"""

import logging
import secrets
from dataclasses import dataclass, field
from enum import Enum

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.backends import default_backend

from .curves import Curve
from .errors import (
    AuthenticationFailed,
    InvalidInputTooShort,
    InvalidKeySize,
    RandomSourceFailure,
)


logger = logging.getLogger(__name__)

# Constants
AES_KEY_SIZE = 32       # 256 bits
NONCE_SIZE = 12         # 96 bits for GCM
TAG_SIZE = 16           # 128 bits for GCM tag
HKDF_INFO = b"ecdhvault-v2"

DECRYPT_FAILED = "Decrypt: message rejected"


class KeyDerivation(Enum):
    """How the ECDH x-coordinate becomes the symmetric key."""
    DECIMAL_PREFIX = "decimal-prefix"
    HKDF_SHA256 = "hkdf-sha256"


DEFAULT_KDF = KeyDerivation.DECIMAL_PREFIX


def hkdf_derive_key(shared_secret: bytes,
                    salt: bytes = None,
                    info: bytes = HKDF_INFO,
                    length: int = AES_KEY_SIZE) -> bytes:
    """
    Derive encryption key from shared secret using HKDF (RFC 5869).

    Args:
        shared_secret: Input key material (fixed-width ECDH x-coordinate)
        salt: Optional salt
        info: Context/application info
        length: Output key length in bytes

    Returns:
        Derived key bytes
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        info=info,
        backend=default_backend()
    )
    return hkdf.derive(shared_secret)


def derive_key(x: int, curve: Curve, kdf: KeyDerivation = DEFAULT_KDF) -> bytes:
    """
    Derive the AES key from the shared x-coordinate.

    Raises:
        InvalidKeySize: DECIMAL_PREFIX and x has fewer than 32 decimal digits
    """
    if kdf is KeyDerivation.DECIMAL_PREFIX:
        rendered = str(x)
        if len(rendered) < AES_KEY_SIZE:
            logger.warning("Shared x-coordinate has only %d decimal digits", len(rendered))
            raise InvalidKeySize(
                f"NewSharedSecret: need {AES_KEY_SIZE} decimal digits, got {len(rendered)}"
            )
        return rendered[:AES_KEY_SIZE].encode("ascii")

    if kdf is KeyDerivation.HKDF_SHA256:
        return hkdf_derive_key(x.to_bytes(curve.field_size, "big"))

    raise ValueError(f"Unknown key derivation: {kdf}")


def generate_nonce() -> bytes:
    """
    Generate a random nonce for AES-GCM.

    CRITICAL: Never reuse a nonce with the same key!

    Raises:
        RandomSourceFailure: If the OS entropy source fails
    """
    try:
        return secrets.token_bytes(NONCE_SIZE)
    except (OSError, NotImplementedError) as err:
        raise RandomSourceFailure(f"Generate nonce: {err}") from err


@dataclass(frozen=True)
class SharedSecret:
    """
    Symmetric key agreed through ECDH.

    The AES-GCM context is rebuilt from the key on each call, so instances
    carry no mutable state and can be shared between threads.
    """
    secret: bytes = field(repr=False)

    def __post_init__(self):
        if not isinstance(self.secret, bytes) or len(self.secret) != AES_KEY_SIZE:
            raise InvalidKeySize(f"Key must be {AES_KEY_SIZE} bytes")

    @classmethod
    def from_x_coordinate(cls, x: int, curve: Curve,
                          kdf: KeyDerivation = DEFAULT_KDF) -> 'SharedSecret':
        """Build from the ECDH x-coordinate."""
        return cls(derive_key(x, curve, kdf))

    def _cipher(self) -> AESGCM:
        try:
            return AESGCM(self.secret)
        except ValueError as err:
            raise InvalidKeySize(f"NewCipher: {err}") from err

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        Encrypt plaintext with AES-256-GCM under a fresh nonce.

        Returns:
            nonce || ciphertext || tag
        """
        nonce = generate_nonce()
        return nonce + self._cipher().encrypt(nonce, plaintext, None)

    def decrypt(self, data: bytes) -> bytes:
        """
        Verify and decrypt a payload produced by encrypt().

        Raises:
            InvalidInputTooShort: Payload shorter than the nonce
            AuthenticationFailed: Tag does not verify (tampering, wrong key)
        """
        if len(data) < NONCE_SIZE:
            raise InvalidInputTooShort(DECRYPT_FAILED)

        nonce, sealed = bytes(data[:NONCE_SIZE]), bytes(data[NONCE_SIZE:])
        try:
            return self._cipher().decrypt(nonce, sealed, None)
        except InvalidTag as err:
            raise AuthenticationFailed(DECRYPT_FAILED) from err

    def encrypt_text(self, message: str) -> bytes:
        """UTF-8 encode and encrypt."""
        return self.encrypt(message.encode("utf-8"))

    def decrypt_text(self, data: bytes) -> str:
        """Decrypt and UTF-8 decode."""
        return self.decrypt(data).decode("utf-8")
