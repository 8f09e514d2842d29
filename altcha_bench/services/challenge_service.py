import secrets
import time
from dataclasses import dataclass

import structlog

from altcha_bench.exceptions import HashBackendFailure, SearchExhausted
from altcha_bench.models.challenge import AlgorithmId, Challenge, SolveResult, search_bound
from altcha_bench.services.hash_backends import call_digest, resolve_digest

logger = structlog.get_logger()


@dataclass(frozen=True)
class SelfTestReport:
    secret_number: int
    max_number: int
    backend: str
    challenge: Challenge
    result: SolveResult


def make_salt() -> str:
    """Current Unix time in milliseconds as lowercase hex."""
    return format(time.time_ns() // 1_000_000, "x")


def random_secret_number(exponent: int) -> int:
    """Pick a secret uniformly from [0, 10**exponent)."""
    return secrets.randbelow(search_bound(exponent))


def generate_challenge(
    secret_number: int,
    algorithm: AlgorithmId | str,
    backend: str,
    salt: str | None = None,
) -> Challenge:
    """Build a challenge whose solution is ``secret_number``."""
    if isinstance(secret_number, bool) or not isinstance(secret_number, int) or secret_number < 0:
        raise ValueError(f"Secret number must be a non-negative integer, got {secret_number!r}")

    algorithm = AlgorithmId.parse(algorithm)
    fn = resolve_digest(algorithm, backend)
    salt = make_salt() if salt is None else salt

    challenge = Challenge(
        algorithm=algorithm,
        digest=call_digest(fn, f"{salt}{secret_number}", algorithm, backend),
        salt=salt,
    )
    logger.debug("challenge_generated", algorithm=algorithm.value, backend=backend, salt=salt)
    return challenge


def solve_challenge(
    challenge: Challenge,
    backend: str,
    max_bound: int,
    start_at: int = 0,
    algorithm: AlgorithmId | str | None = None,
) -> SolveResult:
    """
    Find the smallest n >= start_at whose digest of ``salt + str(n)`` matches.

    Candidates are tried one at a time in increasing order up to and
    including ``max_bound``. The backend/algorithm pair is validated before
    the first candidate.

    Raises:
        UnknownBackend, UnsupportedAlgorithm: invalid backend/algorithm pair
        SearchExhausted: no candidate in [start_at, max_bound] matched
        HashBackendFailure: the provider raised while digesting
    """
    if start_at < 0:
        raise ValueError("start_at must be non-negative")
    if max_bound < 0:
        raise ValueError("max_bound must be non-negative")

    algorithm = AlgorithmId.parse(algorithm or challenge.algorithm)
    fn = resolve_digest(algorithm, backend)
    target = challenge.digest.lower()
    salt = challenge.salt

    start_time = time.perf_counter()
    for n in range(start_at, max_bound + 1):
        try:
            candidate = call_digest(fn, f"{salt}{n}", algorithm, backend)
        except HashBackendFailure as e:
            logger.error(
                "hash_backend_failed",
                backend=backend,
                algorithm=algorithm.value,
                candidate=n,
                error=str(e.__cause__),
            )
            raise

        if candidate == target:
            elapsed_ms = int((time.perf_counter() - start_time) * 1000)
            logger.info(
                "challenge_solved",
                backend=backend,
                algorithm=algorithm.value,
                attempts=n - start_at + 1,
                elapsed_ms=elapsed_ms,
            )
            return SolveResult(number=n, elapsed_ms=elapsed_ms)

    logger.info(
        "challenge_search_exhausted",
        backend=backend,
        algorithm=algorithm.value,
        start_at=start_at,
        max_bound=max_bound,
    )
    raise SearchExhausted(max_bound, start_at)


def run_self_test(algorithm: AlgorithmId | str, backend: str, exponent: int) -> SelfTestReport:
    """Generate a challenge for a random secret and solve it with the same backend."""
    max_number = search_bound(exponent)
    secret_number = random_secret_number(exponent)
    challenge = generate_challenge(secret_number, algorithm, backend)
    result = solve_challenge(challenge, backend, max_number)
    return SelfTestReport(
        secret_number=secret_number,
        max_number=max_number,
        backend=backend,
        challenge=challenge,
        result=result,
    )


_DURATION_UNITS = (
    ("day", 86_400_000, None),
    ("hour", 3_600_000, 24),
    ("minute", 60_000, 60),
    ("second", 1000, 60),
    ("millisecond", 1, 1000),
)


def format_duration(ms: float) -> str:
    """Render a duration like ``"1 second, 250 milliseconds"``."""
    ms = abs(ms)
    parts = []
    for unit, size, modulus in _DURATION_UNITS:
        value = int(ms // size)
        if modulus is not None:
            value %= modulus
        if value:
            parts.append(f"{value} {unit}{'s' if value != 1 else ''}")
    return ", ".join(parts) or "0 milliseconds"
