"""
ECDSA over caller-supplied digests.

Callers hash their own messages; these functions sign and verify the
raw digest bytes and exchange the signature as the (R, S) integer pair.
Per-signature randomness comes from the provider (OpenSSL).
"""

import logging
import secrets
from typing import Dict, Optional, Tuple, Type, Union

from cryptography.exceptions import InternalError, InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from .curves import Curve
from .errors import (
    InvalidHashLength,
    InvalidSignatureEncoding,
    RandomSourceFailure,
)
from .keypair import DECIMAL_PATTERN, KeyPair, PublicKey, parse_decimal


logger = logging.getLogger(__name__)

RANDOM_HASH_SIZE = 64   # digest size of the self-signing path

# Digest widths accepted by the provider through Prehashed
PREHASH_ALGORITHMS: Dict[int, Type[hashes.HashAlgorithm]] = {
    28: hashes.SHA224,
    32: hashes.SHA256,
    48: hashes.SHA384,
    64: hashes.SHA512,
}

SignatureValue = Union[int, str]


def prepare_digest(curve: Curve, digest: bytes) -> Tuple[bytes, Prehashed]:
    """
    Fit a digest of arbitrary length to a width the provider accepts.

    Digests longer than the group order keep their leftmost order-size
    bytes (ECDSA only uses the leftmost bits anyway). Shorter digests
    are left-padded with zeros, which keeps their integer value.

    Raises:
        InvalidHashLength: No accepted width fits within the group order
    """
    digest = bytes(digest)
    if len(digest) > curve.order_size:
        digest = digest[:curve.order_size]

    for size in sorted(PREHASH_ALGORITHMS):
        if len(digest) <= size <= curve.order_size:
            padded = digest.rjust(size, b"\x00")
            return padded, Prehashed(PREHASH_ALGORITHMS[size]())

    raise InvalidHashLength(
        f"Cannot sign a {len(digest)}-byte digest on {curve}"
    )


def sign(key_pair: KeyPair, digest: bytes) -> Tuple[int, int]:
    """
    Sign a digest with the key pair's private scalar.

    Digests are fitted by prepare_digest. On P-521 that covers digests
    of up to 64 bytes; longer ones raise InvalidHashLength, since the
    provider has no 66-byte prehash width.

    Args:
        key_pair: Signer
        digest: Hash of the message (caller computes it)

    Returns:
        (R, S)
    """
    data, algorithm = prepare_digest(key_pair.curve, digest)
    try:
        der = key_pair.private_key.sign(data, ec.ECDSA(algorithm))
    except (OSError, InternalError) as err:
        raise RandomSourceFailure(f"Cannot sign: {err}") from err
    return decode_dss_signature(der)


def sign_random(key_pair: KeyPair) -> Tuple[int, int, bytes]:
    """
    Sign a freshly drawn random 64-byte digest.

    Meant for self-tests and proof of key possession; it does not hash
    any message content.

    Returns:
        (R, S, digest)
    """
    try:
        digest = secrets.token_bytes(RANDOM_HASH_SIZE)
    except (OSError, NotImplementedError) as err:
        raise RandomSourceFailure(f"Generate random hash: {err}") from err

    r, s = sign(key_pair, digest)
    return r, s, digest


def parse_signature_value(value: SignatureValue, label: str,
                          curve: Curve) -> Optional[int]:
    """
    Accept an int or a decimal string for R or S.

    Returns None for a string with more digits than the group order;
    such a value can never verify.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and DECIMAL_PATTERN.fullmatch(value):
        return parse_decimal(value, len(str(curve.order)))
    raise InvalidSignatureEncoding(f"Invalid {label}: {value!r}")


def marshal_signature(r: int, s: int) -> Tuple[str, str]:
    """Decimal wire form of (R, S)."""
    return str(r), str(s)


def verify(curve: Curve, r: SignatureValue, s: SignatureValue,
           digest: bytes, public_bytes: bytes) -> bool:
    """
    Verify a signature against an encoded public key.

    Raises:
        InvalidPublicKey: public_bytes do not decode
        InvalidSignatureEncoding: R or S is malformed
    """
    public_key = PublicKey.from_bytes(curve, public_bytes)
    return verify_with_point(curve, r, s, digest, public_key)


def verify_with_point(curve: Curve, r: SignatureValue, s: SignatureValue,
                      digest: bytes, public_key: PublicKey) -> bool:
    """
    Verify a signature against an already validated public point.

    Returns:
        True if the signature is valid, False otherwise
    """
    r = parse_signature_value(r, "R", curve)
    s = parse_signature_value(s, "S", curve)

    if public_key.curve != curve:
        logger.debug("Public key on %s, expected %s", public_key.curve, curve)
        return False
    if r is None or s is None:
        return False
    if not (0 < r < curve.order and 0 < s < curve.order):
        return False

    data, algorithm = prepare_digest(curve, digest)
    try:
        public_key.to_cryptography().verify(
            encode_dss_signature(r, s), data, ec.ECDSA(algorithm)
        )
    except InvalidSignature:
        return False
    return True
