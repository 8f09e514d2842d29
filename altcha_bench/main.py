from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from altcha_bench.config import settings
from altcha_bench.exceptions import (
    ChallengeError,
    HashBackendFailure,
    SearchExhausted,
    UnknownBackend,
    UnsupportedAlgorithm,
)
from altcha_bench.logging_config import setup_logging
from altcha_bench.middleware.logging import LoggingMiddleware
from altcha_bench.middleware.rate_limit import limiter
from altcha_bench.routers import challenges

setup_logging()

ERROR_STATUS_CODES = {
    UnsupportedAlgorithm: 400,
    UnknownBackend: 400,
    SearchExhausted: 422,
    HashBackendFailure: 502,
}

app = FastAPI(
    title="AltchaBench",
    description="Local Altcha-style proof-of-work challenge solver and benchmark",
    version="0.1.0",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ChallengeError)
async def challenge_error_handler(request: Request, exc: ChallengeError):
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": exc.code})


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

# Routers
app.include_router(challenges.router, prefix="/api/v1", tags=["challenges"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
