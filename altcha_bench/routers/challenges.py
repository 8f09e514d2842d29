import structlog
from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from altcha_bench.config import settings
from altcha_bench.middleware.rate_limit import limiter
from altcha_bench.models.challenge import AlgorithmId, Challenge, search_bound
from altcha_bench.schemas.challenge import (
    AltchaChallenge,
    ChallengeCreate,
    ChallengeSolve,
    SolveResponse,
)
from altcha_bench.schemas.self_test import BackendInfo, SelfTestCreate, SelfTestResponse
from altcha_bench.services.challenge_service import (
    format_duration,
    generate_challenge,
    run_self_test,
    solve_challenge,
)
from altcha_bench.services.hash_backends import list_backends

router = APIRouter()
logger = structlog.get_logger()


@router.get("/backends", response_model=list[BackendInfo])
async def get_backends():
    """List registered hash backends and the algorithms each one supports."""
    return [BackendInfo(name=name, algorithms=algs) for name, algs in list_backends().items()]


@router.post("/challenges", response_model=AltchaChallenge, status_code=201)
async def create_challenge(challenge_data: ChallengeCreate):
    """Create a test challenge whose solution is the given secret number."""
    challenge = generate_challenge(
        secret_number=challenge_data.secret_number,
        algorithm=challenge_data.algorithm,
        backend=challenge_data.backend,
        salt=challenge_data.salt,
    )
    return AltchaChallenge(
        algorithm=challenge.algorithm.value,
        challenge=challenge.digest,
        salt=challenge.salt,
        signature=challenge.signature,
    )


@router.post("/challenges/solve", response_model=SolveResponse)
@limiter.limit(settings.rate_limit_solves)
async def solve(request: Request, solve_data: ChallengeSolve):
    """
    Brute-force a challenge up to 10^exponent.

    The search runs in the threadpool so it does not block the event loop.
    """
    payload = solve_data.challenge
    challenge = Challenge(
        algorithm=AlgorithmId.parse(payload.algorithm),
        digest=payload.challenge,
        salt=payload.salt,
        signature=payload.signature,
    )
    result = await run_in_threadpool(
        solve_challenge,
        challenge,
        solve_data.backend,
        search_bound(solve_data.exponent),
        solve_data.start_at,
    )
    return SolveResponse(
        number=result.number,
        took=result.elapsed_ms,
        took_human=format_duration(result.elapsed_ms),
    )


@router.post("/self-tests", response_model=SelfTestResponse, status_code=201)
@limiter.limit(settings.rate_limit_solves)
async def create_self_test(request: Request, test_data: SelfTestCreate):
    """
    Generate a challenge for a random secret below 10^exponent, then solve it.

    Both steps use the same backend.
    """
    report = await run_in_threadpool(
        run_self_test, test_data.algorithm, test_data.backend, test_data.exponent
    )

    logger.info(
        "self_test_completed",
        algorithm=report.challenge.algorithm.value,
        backend=report.backend,
        exponent=test_data.exponent,
        took=report.result.elapsed_ms,
    )

    return SelfTestResponse(
        secret_number=report.secret_number,
        max_number=report.max_number,
        algorithm=report.challenge.algorithm.value,
        backend=report.backend,
        salt=report.challenge.salt,
        challenge=report.challenge.digest,
        number=report.result.number,
        took=report.result.elapsed_ms,
        took_human=format_duration(report.result.elapsed_ms),
    )
