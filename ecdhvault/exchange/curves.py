"""
Supported Elliptic Curves

The NIST prime curves, exposed as immutable values that are passed
explicitly to every constructor. Point arithmetic, validation and
encoding are delegated to the cryptography package.
"""

from dataclasses import dataclass
from typing import Dict, Type

from cryptography.hazmat.primitives.asymmetric import ec

from .errors import UnsupportedCurve


@dataclass(frozen=True)
class Curve:
    """Named curve with the domain parameters the exchange layer needs."""
    name: str
    algorithm: Type[ec.EllipticCurve]
    key_size: int   # bits per coordinate
    order: int      # group order n

    @property
    def field_size(self) -> int:
        """Byte width of one coordinate."""
        return (self.key_size + 7) // 8

    @property
    def order_size(self) -> int:
        """Byte width of the group order."""
        return (self.order.bit_length() + 7) // 8

    @property
    def point_size(self) -> int:
        """Length of an uncompressed point: tag + X + Y."""
        return 1 + 2 * self.field_size

    @property
    def ec_curve(self) -> ec.EllipticCurve:
        """Fresh provider curve instance."""
        return self.algorithm()

    def __str__(self) -> str:
        return self.name


P224 = Curve(
    name="P-224",
    algorithm=ec.SECP224R1,
    key_size=224,
    order=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFF16A2E0B8F03E13DD29455C5C2A3D,
)

P256 = Curve(
    name="P-256",
    algorithm=ec.SECP256R1,
    key_size=256,
    order=0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551,
)

P384 = Curve(
    name="P-384",
    algorithm=ec.SECP384R1,
    key_size=384,
    order=int(
        "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF"
        "C7634D81F4372DDF581A0DB248B0A77AECEC196ACCC52973",
        16,
    ),
)

P521 = Curve(
    name="P-521",
    algorithm=ec.SECP521R1,
    key_size=521,
    order=int(
        "01FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFA"
        "51868783BF2F966B7FCC0148F709A5D03BB5C9B8899C47AEBB6FB71E91386409",
        16,
    ),
)

DEFAULT_CURVE = P256

SUPPORTED_CURVES: Dict[str, Curve] = {
    curve.name: curve for curve in (P224, P256, P384, P521)
}


def get_curve(name: str) -> Curve:
    """
    Look up a curve by NIST name ("P-256") or SEC name ("secp256r1").

    Raises:
        UnsupportedCurve: If the name is not registered
    """
    wanted = name.strip().lower()
    for curve in SUPPORTED_CURVES.values():
        if wanted in (curve.name.lower(), curve.algorithm.name):
            return curve
    raise UnsupportedCurve(f"Unsupported curve: {name}")


def curve_for(key: ec.EllipticCurvePublicKey) -> Curve:
    """Map a provider key back to its registered Curve."""
    for curve in SUPPORTED_CURVES.values():
        if isinstance(key.curve, curve.algorithm):
            return curve
    raise UnsupportedCurve(f"Unsupported curve: {key.curve.name}")
