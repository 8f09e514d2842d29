from altcha_bench.schemas.challenge import (
    AltchaChallenge,
    ChallengeCreate,
    ChallengeSolve,
    SolveResponse,
)
from altcha_bench.schemas.self_test import BackendInfo, SelfTestCreate, SelfTestResponse

__all__ = [
    "AltchaChallenge",
    "BackendInfo",
    "ChallengeCreate",
    "ChallengeSolve",
    "SelfTestCreate",
    "SelfTestResponse",
    "SolveResponse",
]
