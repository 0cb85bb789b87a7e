"""
Key Pair Module

ECDH/ECDSA key pairs on the NIST prime curves:
- Random generation from the OS CSPRNG
- Marshaling for transport (decimal private scalar, uncompressed public point)
- Unmarshaling with point validation
- Shared secret derivation with a peer public key

Wire formats:
    private key: base-10 ASCII digits of the scalar
    public key:  0x04 | X | Y  (each coordinate big-endian, field-width padded)
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from cryptography.exceptions import InternalError
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.backends import default_backend

from .curves import Curve, DEFAULT_CURVE
from .errors import (
    ECDHFailed,
    InvalidPrivateKey,
    InvalidPublicKey,
    KeyMismatch,
    RandomSourceFailure,
)
from .shared_secret import DEFAULT_KDF, KeyDerivation, SharedSecret


logger = logging.getLogger(__name__)

# Constants
UNCOMPRESSED_POINT_TAG = 0x04
DECIMAL_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class PublicKey:
    """Affine public point (X, Y) on a specific curve."""
    curve: Curve
    x: int
    y: int

    def to_bytes(self) -> bytes:
        """Encode as an uncompressed point."""
        size = self.curve.field_size
        return (
            bytes([UNCOMPRESSED_POINT_TAG]) +
            self.x.to_bytes(size, "big") +
            self.y.to_bytes(size, "big")
        )

    @classmethod
    def from_bytes(cls, curve: Curve, data: bytes) -> 'PublicKey':
        """
        Decode and validate an uncompressed point.

        Args:
            curve: Curve the point must lie on
            data: 0x04 | X | Y

        Returns:
            Validated PublicKey

        Raises:
            InvalidPublicKey: Wrong length, wrong tag, or point not on the curve
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidPublicKey("Invalid public key: expected bytes")
        data = bytes(data)

        if len(data) != curve.point_size or data[0] != UNCOMPRESSED_POINT_TAG:
            raise InvalidPublicKey(
                f"Invalid public key: expected {curve.point_size}-byte "
                f"uncompressed {curve} point, got {len(data)} bytes"
            )

        try:
            key = ec.EllipticCurvePublicKey.from_encoded_point(curve.ec_curve, data)
        except ValueError as err:
            raise InvalidPublicKey(f"Invalid public key: not a point on {curve}") from err

        return cls.from_cryptography(curve, key)

    @classmethod
    def from_cryptography(cls, curve: Curve,
                          key: ec.EllipticCurvePublicKey) -> 'PublicKey':
        """Wrap a provider public key."""
        numbers = key.public_numbers()
        return cls(curve, numbers.x, numbers.y)

    def to_cryptography(self) -> ec.EllipticCurvePublicKey:
        """Provider public key for this point."""
        try:
            return ec.EllipticCurvePublicKey.from_encoded_point(
                self.curve.ec_curve, self.to_bytes()
            )
        except (ValueError, OverflowError) as err:
            raise InvalidPublicKey(f"Invalid public key: not a point on {self.curve}") from err


@dataclass(frozen=True)
class KeyPair:
    """
    Private scalar and public point on one curve.

    Generated pairs satisfy public_key = private_value * G. Unmarshaled
    pairs carry the public point as supplied unless check_public was
    requested.
    """
    curve: Curve
    private_value: int = field(repr=False)
    public_key: PublicKey

    @classmethod
    def generate(cls, curve: Curve = DEFAULT_CURVE) -> 'KeyPair':
        """
        Generate a new random key pair.

        Raises:
            RandomSourceFailure: If the entropy source or provider fails
        """
        try:
            private_key = ec.generate_private_key(curve.ec_curve, default_backend())
        except (OSError, InternalError) as err:
            raise RandomSourceFailure(f"GenerateKey: {err}") from err

        public_key = PublicKey.from_cryptography(curve, private_key.public_key())
        key_pair = cls(curve, private_key.private_numbers().private_value, public_key)

        logger.debug("Generated %s key pair, public key %s...",
                     curve, public_key.to_bytes().hex()[:16])
        return key_pair

    @property
    def private_key(self) -> ec.EllipticCurvePrivateKey:
        """Provider private key for this scalar."""
        return ec.derive_private_key(
            self.private_value, self.curve.ec_curve, default_backend()
        )

    def derived_public_key(self) -> PublicKey:
        """Recompute private_value * G."""
        return PublicKey.from_cryptography(self.curve, self.private_key.public_key())

    def marshal_private(self) -> str:
        """Private scalar as decimal text."""
        return str(self.private_value)

    def marshal_public(self) -> bytes:
        """Public point as uncompressed bytes."""
        return self.public_key.to_bytes()

    def marshal(self) -> Tuple[str, bytes]:
        """Both halves for transporting and storing."""
        return self.marshal_private(), self.marshal_public()

    @classmethod
    def unmarshal(cls, curve: Curve, private_str: str, public_bytes: bytes,
                  check_public: bool = False) -> 'KeyPair':
        """
        Restore a key pair from its marshaled form.

        Args:
            curve: Curve the key pair belongs to
            private_str: Decimal private scalar
            public_bytes: Uncompressed public point
            check_public: Also require public point == private_value * G

        Raises:
            InvalidPrivateKey: Scalar is not decimal or not in [1, n-1]
            InvalidPublicKey: Point fails to decode or validate
            KeyMismatch: check_public is set and the points differ
        """
        private_value = parse_private_value(curve, private_str)
        public_key = PublicKey.from_bytes(curve, public_bytes)
        key_pair = cls(curve, private_value, public_key)

        if check_public and key_pair.derived_public_key() != public_key:
            logger.warning("Unmarshaled %s public key does not match private key", curve)
            raise KeyMismatch("Public key does not match private key")

        return key_pair

    def generate_secret(self, peer: Union[PublicKey, bytes],
                        kdf: KeyDerivation = DEFAULT_KDF) -> SharedSecret:
        """
        Derive the shared secret with a peer.

        Args:
            peer: Peer public key, or its uncompressed encoding
            kdf: How the ECDH x-coordinate becomes the AES key

        Returns:
            SharedSecret identical to the one the peer derives

        Raises:
            InvalidPublicKey: peer bytes do not decode
            ECDHFailed: Peer is on another curve or the exchange fails
            InvalidKeySize: Derived key is not 32 bytes
        """
        if not isinstance(peer, PublicKey):
            peer = PublicKey.from_bytes(self.curve, peer)

        if peer.curve != self.curve:
            raise ECDHFailed(
                f"GenerateSecret failed: peer on {peer.curve}, key pair on {self.curve}"
            )

        try:
            shared = self.private_key.exchange(ec.ECDH(), peer.to_cryptography())
        except (ValueError, InvalidPublicKey) as err:
            raise ECDHFailed(f"GenerateSecret failed: {err}") from err

        x = int.from_bytes(shared, "big")
        logger.debug("Derived %s shared x-coordinate, kdf=%s", self.curve, kdf.value)
        return SharedSecret.from_x_coordinate(x, self.curve, kdf)


def parse_decimal(text: str, max_digits: int) -> Optional[int]:
    """
    Parse text already matched by DECIMAL_PATTERN.

    Returns None when the value has more significant digits than
    max_digits, without converting it.
    """
    sign = -1 if text.startswith("-") else 1
    digits = text.lstrip("+-").lstrip("0")
    if len(digits) > max_digits:
        return None
    return sign * int(digits or "0", 10)


def parse_private_value(curve: Curve, private_str: str) -> int:
    """Parse a decimal private scalar and check it lies in [1, n-1]."""
    if not isinstance(private_str, str) or not DECIMAL_PATTERN.fullmatch(private_str):
        raise InvalidPrivateKey("Invalid private key")

    value = parse_decimal(private_str, len(str(curve.order)))
    if value is None or not 1 <= value < curve.order:
        raise InvalidPrivateKey(f"Invalid private key: scalar out of range for {curve}")
    return value


def generate_key(curve: Curve = DEFAULT_CURVE) -> KeyPair:
    """Generate a new random key pair."""
    return KeyPair.generate(curve)


def unmarshal(curve: Curve, private_str: str, public_bytes: bytes,
              check_public: bool = False) -> KeyPair:
    """Restore a key pair from a decimal scalar and an uncompressed point."""
    return KeyPair.unmarshal(curve, private_str, public_bytes, check_public)


def unmarshal_public(curve: Curve, public_bytes: bytes) -> PublicKey:
    """Restore a peer public key from an uncompressed point."""
    return PublicKey.from_bytes(curve, public_bytes)
