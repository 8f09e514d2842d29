"""Tests for challenge generation and solving."""

import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from altcha_bench.exceptions import (
    HashBackendFailure,
    SearchExhausted,
    UnknownBackend,
    UnsupportedAlgorithm,
)
from altcha_bench.models.challenge import AlgorithmId, Challenge, SolveResult, search_bound
from altcha_bench.services import challenge_service
from altcha_bench.services.challenge_service import (
    format_duration,
    generate_challenge,
    make_salt,
    random_secret_number,
    run_self_test,
    solve_challenge,
)
from altcha_bench.services.hash_backends import BACKENDS, REFERENCE_BACKEND, list_backends
from tests.test_utils import sha256_hex


@pytest.fixture
def reference_challenge():
    """Challenge for secret 42 with a fixed salt on the reference backend."""
    return generate_challenge(42, AlgorithmId.SHA256, REFERENCE_BACKEND, salt="abc123")


class TestGenerateChallenge:
    """Tests for generate_challenge."""

    def test_digest_of_salt_and_number(self, reference_challenge):
        assert reference_challenge.algorithm is AlgorithmId.SHA256
        assert reference_challenge.salt == "abc123"
        assert reference_challenge.digest == sha256_hex("abc12342")

    def test_signature_is_empty(self, reference_challenge):
        assert reference_challenge.signature == ""

    def test_challenge_is_immutable(self, reference_challenge):
        with pytest.raises(AttributeError):
            reference_challenge.salt = "other"

    def test_default_salt_is_hex_timestamp(self):
        challenge = generate_challenge(7, "SHA-1", REFERENCE_BACKEND)
        assert re.fullmatch(r"[0-9a-f]+", challenge.salt)

    def test_unsupported_algorithm(self):
        with pytest.raises(UnsupportedAlgorithm):
            generate_challenge(42, AlgorithmId.MD5, REFERENCE_BACKEND)

    def test_unknown_backend(self):
        with pytest.raises(UnknownBackend):
            generate_challenge(42, AlgorithmId.SHA256, "react-native-sha256")

    def test_negative_secret_rejected(self):
        with pytest.raises(ValueError):
            generate_challenge(-1, AlgorithmId.SHA256, REFERENCE_BACKEND)

    @pytest.mark.parametrize("secret", [True, False, 4.0, "42"])
    def test_non_integer_secret_rejected(self, secret):
        with pytest.raises(ValueError):
            generate_challenge(secret, AlgorithmId.SHA256, REFERENCE_BACKEND)


class TestSolveChallenge:
    """Tests for the bounded brute-force search."""

    def test_solves_reference_scenario(self, reference_challenge):
        result = solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound=100)
        assert result.number == 42
        assert result.elapsed_ms >= 0

    def test_bound_below_secret_is_exhausted(self, reference_challenge):
        with pytest.raises(SearchExhausted) as exc_info:
            solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound=41)
        assert exc_info.value.max_bound == 41
        assert exc_info.value.start_at == 0

    def test_bound_is_inclusive(self, reference_challenge):
        result = solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound=42)
        assert result.number == 42

    def test_does_not_search_backward(self, reference_challenge):
        with pytest.raises(SearchExhausted):
            solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound=1000, start_at=43)

    def test_start_at_the_secret(self, reference_challenge):
        result = solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound=42, start_at=42)
        assert result.number == 42

    def test_start_above_bound_is_exhausted(self, reference_challenge):
        with pytest.raises(SearchExhausted):
            solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound=10, start_at=11)

    def test_repeated_solves_return_same_number(self, reference_challenge):
        numbers = {
            solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound=100).number
            for _ in range(3)
        }
        assert numbers == {42}

    def test_smallest_match_wins(self, monkeypatch):
        """When several candidates collide, the lowest one at or above start_at is returned."""
        # Digest that ignores the number's last digit: 40..49 all match
        monkeypatch.setitem(
            BACKENDS, "collide", {AlgorithmId.SHA256: lambda data: data.decode()[:-1]}
        )
        challenge = Challenge(algorithm=AlgorithmId.SHA256, digest="s4", salt="s")

        assert solve_challenge(challenge, "collide", max_bound=100).number == 40
        assert solve_challenge(challenge, "collide", max_bound=100, start_at=45).number == 45

    def test_digest_comparison_ignores_case(self, reference_challenge):
        upper = Challenge(
            algorithm=reference_challenge.algorithm,
            digest=reference_challenge.digest.upper(),
            salt=reference_challenge.salt,
        )
        assert solve_challenge(upper, REFERENCE_BACKEND, max_bound=100).number == 42

    def test_algorithm_override(self, reference_challenge):
        """An explicit algorithm replaces the one stored on the challenge."""
        with pytest.raises(SearchExhausted):
            solve_challenge(
                reference_challenge, REFERENCE_BACKEND, max_bound=100, algorithm=AlgorithmId.SHA1
            )

    def test_unsupported_algorithm_fails_before_searching(self):
        challenge = Challenge(algorithm=AlgorithmId.MD5, digest="00", salt="abc123")
        with pytest.raises(UnsupportedAlgorithm):
            solve_challenge(challenge, REFERENCE_BACKEND, max_bound=100)

    def test_unknown_backend(self, reference_challenge):
        with pytest.raises(UnknownBackend):
            solve_challenge(reference_challenge, "quick-crypto", max_bound=100)

    def test_backend_failure_aborts_search(self, monkeypatch):
        attempts = []

        def flaky(data: bytes) -> str:
            attempts.append(data)
            if len(attempts) == 3:
                raise OSError("device lost")
            return "nope"

        monkeypatch.setitem(BACKENDS, "flaky", {AlgorithmId.SHA256: flaky})
        challenge = Challenge(algorithm=AlgorithmId.SHA256, digest="ff", salt="s")

        with pytest.raises(HashBackendFailure) as exc_info:
            solve_challenge(challenge, "flaky", max_bound=1000)

        assert not isinstance(exc_info.value, SearchExhausted)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert attempts == [b"s0", b"s1", b"s2"]

    def test_candidates_tried_in_increasing_order(self, monkeypatch):
        seen = []

        def record(data: bytes) -> str:
            seen.append(data.decode())
            return "miss"

        monkeypatch.setitem(BACKENDS, "recorder", {AlgorithmId.SHA1: record})
        challenge = Challenge(algorithm=AlgorithmId.SHA1, digest="hit", salt="q")

        with pytest.raises(SearchExhausted):
            solve_challenge(challenge, "recorder", max_bound=12, start_at=8)

        assert seen == ["q8", "q9", "q10", "q11", "q12"]

    def test_elapsed_time_measured_from_first_candidate(self, monkeypatch, reference_challenge):
        ticks = iter([10.0, 10.25])
        monkeypatch.setattr(challenge_service.time, "perf_counter", lambda: next(ticks))

        result = solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound=100)
        assert result == SolveResult(number=42, elapsed_ms=250)

    @pytest.mark.parametrize("start_at, max_bound", [(-1, 10), (0, -5)])
    def test_negative_arguments_rejected(self, reference_challenge, start_at, max_bound):
        with pytest.raises(ValueError):
            solve_challenge(reference_challenge, REFERENCE_BACKEND, max_bound, start_at)


class TestRoundTrip:
    """generate + solve recovers the secret for every supported pair."""

    @pytest.mark.parametrize(
        "backend, algorithm",
        [(name, alg) for name, algs in list_backends().items() for alg in algs],
    )
    def test_recovers_secret(self, backend, algorithm):
        challenge = generate_challenge(137, algorithm, backend, salt="5eed")
        assert solve_challenge(challenge, backend, max_bound=search_bound(3)).number == 137


class TestConcurrentSolves:
    """Solvers running side by side on shared backends do not interfere."""

    @pytest.mark.parametrize(
        "backend, algorithm",
        [(name, alg) for name, algs in list_backends().items() for alg in algs],
    )
    def test_parallel_solves_recover_their_own_secrets(self, backend, algorithm):
        secrets_by_salt = {f"salt{i:02x}": 37 * i + 5 for i in range(8)}
        challenges = [
            generate_challenge(secret, algorithm, backend, salt=salt)
            for salt, secret in secrets_by_salt.items()
        ]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(
                pool.map(lambda c: solve_challenge(c, backend, max_bound=1000), challenges)
            )

        assert [r.number for r in results] == list(secrets_by_salt.values())


class TestSelfTest:
    """Tests for the generate-then-solve self test."""

    def test_self_test_recovers_secret(self):
        report = run_self_test("SHA-256", REFERENCE_BACKEND, exponent=3)
        assert report.max_number == 1000
        assert 0 <= report.secret_number < 1000
        assert report.result.number == report.secret_number
        assert report.backend == REFERENCE_BACKEND

    def test_self_test_propagates_backend_errors(self):
        with pytest.raises(UnsupportedAlgorithm):
            run_self_test("RMD160", REFERENCE_BACKEND, exponent=2)


class TestHelpers:
    """Tests for the small helpers around the engine."""

    @pytest.mark.parametrize("exponent, expected", [(1, 10), (5, 100_000), (12, 10**12)])
    def test_search_bound(self, exponent, expected):
        assert search_bound(exponent) == expected

    @pytest.mark.parametrize("exponent", [0, -3, 2.5, True])
    def test_search_bound_rejects_invalid_exponents(self, exponent):
        with pytest.raises(ValueError):
            search_bound(exponent)

    def test_random_secret_number_in_range(self):
        for _ in range(50):
            assert 0 <= random_secret_number(1) < 10

    def test_make_salt_tracks_clock(self, monkeypatch):
        monkeypatch.setattr(challenge_service.time, "time_ns", lambda: 1_700_000_000_000_000_000)
        assert make_salt() == format(1_700_000_000_000, "x")

    def test_algorithm_parse_case_insensitive(self):
        assert AlgorithmId.parse("md5") is AlgorithmId.MD5
        assert AlgorithmId.parse(AlgorithmId.RMD160) is AlgorithmId.RMD160


class TestFormatDuration:
    """Tests for human readable durations."""

    @pytest.mark.parametrize(
        "ms, expected",
        [
            (0, "0 milliseconds"),
            (1, "1 millisecond"),
            (1250, "1 second, 250 milliseconds"),
            (60_000, "1 minute"),
            (3_723_004, "1 hour, 2 minutes, 3 seconds, 4 milliseconds"),
            (90_000_000, "1 day, 1 hour"),
            (-2000, "2 seconds"),
        ],
    )
    def test_format_duration(self, ms, expected):
        assert format_duration(ms) == expected
