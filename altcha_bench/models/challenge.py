from dataclasses import dataclass
from enum import Enum

from altcha_bench.exceptions import UnsupportedAlgorithm


class AlgorithmId(str, Enum):
    SHA256 = "SHA-256"
    SHA512 = "SHA-512"
    SHA384 = "SHA-384"
    SHA224 = "SHA-224"
    SHA1 = "SHA-1"
    MD5 = "MD5"
    RMD160 = "RMD160"

    @classmethod
    def parse(cls, value: "str | AlgorithmId") -> "AlgorithmId":
        """Look up an algorithm by name, ignoring case."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            supported = ", ".join(a.value for a in cls)
            raise UnsupportedAlgorithm(
                f"Unknown algorithm {value!r}. Supported: {supported}"
            ) from None


@dataclass(frozen=True)
class Challenge:
    algorithm: AlgorithmId
    digest: str
    salt: str
    # Placeholder for a server signature; never populated or verified.
    signature: str = ""


@dataclass(frozen=True)
class SolveResult:
    number: int
    elapsed_ms: int


def search_bound(exponent: int) -> int:
    """Inclusive search ceiling for a caller-chosen exponent (``10 ** exponent``)."""
    if isinstance(exponent, bool) or not isinstance(exponent, int) or exponent < 1:
        raise ValueError(f"Exponent must be a positive integer, got {exponent!r}")
    return 10**exponent
