"""Post-quantum primitive interfaces and stub implementations.

Rewritten code calls PQ primitives by name (``sphincsHash``,
``dilithiumVerify``, ``pq_hash.hash`` ...). This module is the single place
that knows which primitives exist, which identifiers each one is reached
through in every source language, and how strong it is.

Implementations register themselves into ``registry``. The stubs below
produce deterministic placeholder values only; a real backend (liboqs,
pqcrypto) can be registered under the same name without touching the
scanner, the rewrite engine or the scaffold generator.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

__all__ = [
    "HashPrimitive",
    "SignaturePrimitive",
    "KEMPrimitive",
    "registry",
    "pq_markers",
    "quantum_secure_random",
    "get_security_level",
    "recommend_algorithm",
]


class HashPrimitive(Protocol):
    """Quantum-resistant hash contract."""
    name: str
    family: str
    identifiers: Dict[str, Tuple[str, ...]]
    def digest(self, data: str) -> str: ...


class SignaturePrimitive(Protocol):
    """Signature verification contract (ecrecover-compatible arguments)."""
    name: str
    family: str
    identifiers: Dict[str, Tuple[str, ...]]
    def verify(self, message_hash: str, v: int, r: str, s: str) -> bool: ...


class KEMPrimitive(Protocol):
    """Key Encapsulation Mechanism contract."""
    name: str
    family: str
    identifiers: Dict[str, Tuple[str, ...]]
    def encapsulate(self, public_key: str) -> Tuple[str, str]: ...


class _Registry:
    def __init__(self) -> None:
        self._items: Dict[str, Any] = {}

    def register(self, name: str) -> Callable[[Any], Any]:
        def _inner(cls_or_obj: Any) -> Any:
            self._items[name] = cls_or_obj
            return cls_or_obj
        return _inner

    def get(self, name: str) -> Any:
        """Return a fresh instance of the primitive registered as *name*."""
        item = self._items[name]
        return item() if isinstance(item, type) else item

    def list(self) -> Dict[str, Any]:
        return dict(self._items)


registry = _Registry()


def _mock_hash(data: str) -> str:
    """32-bit rolling string hash rendered as 8+ hex digits."""
    value = 0
    for char in data:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x").rjust(8, "0")


@registry.register("sphincs")
class SphincsPlusHash:
    name = "sphincs"
    family = "hash"
    identifiers = {
        "solidity": ("sphincsHash", "SPHINCSPlus"),
        "python": ("sphincs",),
        "rust": ("sphincs",),
    }

    def digest(self, data: str) -> str:
        return f"sphincs_hash_{_mock_hash(data)}"


@registry.register("pq_hash")
class PostQuantumHash:
    """General-purpose hash combining SPHINCS+ and SHAKE-256 components."""
    name = "pq_hash"
    family = "hash"
    identifiers = {
        "solidity": ("postQuantumHash",),
        "python": ("pqcrypto",),
        "rust": ("pqcrypto",),
    }

    def digest(self, data: str) -> str:
        sphincs_component = _mock_hash(data + "sphincs")
        shake_component = _mock_hash(data + "shake256")
        return f"pq_hash_{sphincs_component}_{shake_component}"


@registry.register("dilithium")
class DilithiumSignature:
    name = "dilithium"
    family = "signature"
    identifiers = {
        "solidity": ("dilithiumVerify",),
        "python": ("dilithium",),
        "rust": ("dilithium",),
    }

    def verify(self, message_hash: str, v: int, r: str, s: str) -> bool:
        logger.debug("[STUB] Dilithium verification for hash: %s", message_hash)
        return True


@registry.register("kyber")
class KyberKEM:
    name = "kyber"
    family = "kem"
    identifiers = {
        "solidity": ("kyberEncapsulate",),
        "python": ("kyber",),
        "rust": ("kyber",),
    }

    def encapsulate(self, public_key: str) -> Tuple[str, str]:
        return (
            f"kyber_ct_{_mock_hash(public_key)}",
            f"kyber_ss_{_mock_hash(public_key + 'secret')}",
        )


def pq_markers(language: str) -> Tuple[str, ...]:
    """Identifiers whose presence in *language* source signals PQ usage."""
    markers = []
    for name in registry.list():
        primitive = registry.get(name)
        for identifier in getattr(primitive, "identifiers", {}).get(language, ()):
            if identifier not in markers:
                markers.append(identifier)
    return tuple(markers)


def quantum_secure_random(length: int, rng: Optional[random.Random] = None) -> str:
    """Stub quantum-entropy source: ``qrng_`` followed by *length* hex digits."""
    rng = rng or random.Random()
    return "qrng_" + "".join(rng.choice("0123456789abcdef") for _ in range(length))


# Post-quantum security bits per algorithm
SECURITY_LEVELS: Dict[str, int] = {
    "sphincs": 128,
    "dilithium": 128,
    "kyber": 128,
    "classical_ecdsa": 0,
    "classical_rsa": 0,
    "classical_sha256": 64,
}


def get_security_level(algorithm: str) -> int:
    return SECURITY_LEVELS.get(algorithm, 0)


_RECOMMENDATIONS = {
    "hash": "SPHINCS+ (quantum-resistant hash-based signatures with secure hash functions)",
    "signature": "Dilithium (lattice-based post-quantum digital signatures)",
    "encryption": "Kyber (lattice-based post-quantum key encapsulation mechanism)",
}


def recommend_algorithm(use_case: str) -> str:
    """Recommend a PQ algorithm for ``hash``, ``signature`` or ``encryption``."""
    try:
        return _RECOMMENDATIONS[use_case]
    except KeyError:
        raise ValueError(
            f"Unknown use case '{use_case}'. Must be one of: {', '.join(sorted(_RECOMMENDATIONS))}"
        ) from None
