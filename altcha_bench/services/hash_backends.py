"""
Hash providers the challenge engine can route digests through.

Each provider maps the algorithms it implements to a function taking bytes
and returning a lowercase hex digest. Providers hold no state, so a resolved
digest function can be called concurrently from any number of solvers.
"""

import hashlib
from collections.abc import Callable
from types import ModuleType

from Crypto.Hash import MD5, RIPEMD160, SHA1, SHA224, SHA256, SHA384, SHA512
from cryptography.hazmat.primitives import hashes

from altcha_bench.exceptions import HashBackendFailure, UnknownBackend, UnsupportedAlgorithm
from altcha_bench.models.challenge import AlgorithmId

DigestFn = Callable[[bytes], str]

REFERENCE_BACKEND = "reference-sha256-only"
HASHLIB_BACKEND = "hashlib"
PYCRYPTODOME_BACKEND = "pycryptodome"
CRYPTOGRAPHY_BACKEND = "cryptography"

_HASHLIB_NAMES = {
    AlgorithmId.SHA256: "sha256",
    AlgorithmId.SHA512: "sha512",
    AlgorithmId.SHA384: "sha384",
    AlgorithmId.SHA224: "sha224",
    AlgorithmId.SHA1: "sha1",
    AlgorithmId.MD5: "md5",
    AlgorithmId.RMD160: "ripemd160",
}

_PYCRYPTODOME_MODULES = {
    AlgorithmId.SHA256: SHA256,
    AlgorithmId.SHA512: SHA512,
    AlgorithmId.SHA384: SHA384,
    AlgorithmId.SHA224: SHA224,
    AlgorithmId.SHA1: SHA1,
    AlgorithmId.MD5: MD5,
    AlgorithmId.RMD160: RIPEMD160,
}

# cryptography does not expose RIPEMD-160
_CRYPTOGRAPHY_ALGORITHMS = {
    AlgorithmId.SHA256: hashes.SHA256,
    AlgorithmId.SHA512: hashes.SHA512,
    AlgorithmId.SHA384: hashes.SHA384,
    AlgorithmId.SHA224: hashes.SHA224,
    AlgorithmId.SHA1: hashes.SHA1,
    AlgorithmId.MD5: hashes.MD5,
}


def _hashlib_digest(name: str) -> DigestFn:
    return lambda data: hashlib.new(name, data).hexdigest()


def _pycryptodome_digest(module: ModuleType) -> DigestFn:
    return lambda data: module.new(data=data).hexdigest()


def _cryptography_digest(algorithm_cls: type[hashes.HashAlgorithm]) -> DigestFn:
    def compute(data: bytes) -> str:
        h = hashes.Hash(algorithm_cls())
        h.update(data)
        return h.finalize().hex()

    return compute


def _hashlib_supports(name: str) -> bool:
    # RIPEMD-160 is gone from the default provider of OpenSSL 3 and may be
    # listed yet refuse to construct.
    try:
        hashlib.new(name)
    except ValueError:
        return False
    return True


def _build_registry() -> dict[str, dict[AlgorithmId, DigestFn]]:
    native = {
        algorithm: _hashlib_digest(name)
        for algorithm, name in _HASHLIB_NAMES.items()
        if _hashlib_supports(name)
    }
    return {
        REFERENCE_BACKEND: {
            AlgorithmId.SHA256: _hashlib_digest("sha256"),
            AlgorithmId.SHA1: _hashlib_digest("sha1"),
        },
        HASHLIB_BACKEND: native,
        PYCRYPTODOME_BACKEND: {
            algorithm: _pycryptodome_digest(module)
            for algorithm, module in _PYCRYPTODOME_MODULES.items()
        },
        CRYPTOGRAPHY_BACKEND: {
            algorithm: _cryptography_digest(cls)
            for algorithm, cls in _CRYPTOGRAPHY_ALGORITHMS.items()
        },
    }


BACKENDS = _build_registry()


def list_backends() -> dict[str, list[str]]:
    """Backend names mapped to the algorithms each supports, in enum order."""
    return {
        name: [a.value for a in AlgorithmId if a in digests]
        for name, digests in BACKENDS.items()
    }


def resolve_digest(algorithm: AlgorithmId | str, backend: str) -> DigestFn:
    """
    Validate a (backend, algorithm) pair and return its digest function.

    Raises:
        UnknownBackend: no provider is registered under ``backend``
        UnsupportedAlgorithm: the provider does not implement ``algorithm``
    """
    digests = BACKENDS.get(backend)
    if digests is None:
        known = ", ".join(BACKENDS)
        raise UnknownBackend(f"Unknown hash backend {backend!r}. Registered: {known}")

    algorithm = AlgorithmId.parse(algorithm)
    fn = digests.get(algorithm)
    if fn is None:
        supported = ", ".join(a.value for a in AlgorithmId if a in digests)
        raise UnsupportedAlgorithm(
            f"Invalid algorithm {algorithm.value} for {backend}. Only {supported} are supported"
        )
    return fn


def call_digest(fn: DigestFn, data: str, algorithm: AlgorithmId, backend: str) -> str:
    """
    Run a resolved digest function, wrapping provider errors.

    Text that cannot be UTF-8 encoded raises UnicodeEncodeError (a ValueError)
    before the provider is called.
    """
    payload = data.encode("utf-8")
    try:
        return fn(payload)
    except Exception as e:
        raise HashBackendFailure(backend, algorithm.value, str(e)) from e


def digest(data: str, algorithm: AlgorithmId | str, backend: str) -> str:
    """Hex digest of ``data`` computed by ``backend`` using ``algorithm``."""
    algorithm = AlgorithmId.parse(algorithm)
    return call_digest(resolve_digest(algorithm, backend), data, algorithm, backend)
