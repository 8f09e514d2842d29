class ChallengeError(Exception):
    """Base class for every failure the challenge engine reports."""

    code = "challenge_error"


class UnsupportedAlgorithm(ChallengeError):
    code = "unsupported_algorithm"


class UnknownBackend(ChallengeError):
    code = "unknown_backend"


class SearchExhausted(ChallengeError):
    """No candidate in ``[start_at, max_bound]`` hashed to the challenge digest."""

    code = "search_exhausted"

    def __init__(self, max_bound: int, start_at: int = 0):
        super().__init__(f"No solution found between {start_at} and {max_bound}")
        self.max_bound = max_bound
        self.start_at = start_at


class HashBackendFailure(ChallengeError):
    """A hash provider raised while digesting. The original error is ``__cause__``."""

    code = "hash_backend_failure"

    def __init__(self, backend: str, algorithm: str, message: str):
        super().__init__(f"{backend} failed computing {algorithm}: {message}")
        self.backend = backend
        self.algorithm = algorithm
