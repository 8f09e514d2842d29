from pydantic import BaseModel, Field, field_validator

from altcha_bench.config import settings


def _require_utf8(value: str | None) -> str | None:
    """Reject text such as lone surrogates that cannot be hashed as UTF-8."""
    if value is not None:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            raise ValueError("Salt must be valid UTF-8 text") from None
    return value


class AltchaChallenge(BaseModel):
    algorithm: str
    challenge: str = Field(..., min_length=1, description="Hex digest to match")
    salt: str
    signature: str = ""

    @field_validator("salt")
    @classmethod
    def validate_salt(cls, v):
        return _require_utf8(v)


class ChallengeCreate(BaseModel):
    secret_number: int = Field(..., ge=0)
    algorithm: str = settings.default_algorithm
    backend: str = settings.default_backend
    salt: str | None = Field(None, description="Defaults to the current time in hex")

    @field_validator("salt")
    @classmethod
    def validate_salt(cls, v):
        return _require_utf8(v)


class ChallengeSolve(BaseModel):
    challenge: AltchaChallenge
    backend: str = settings.default_backend
    exponent: int = Field(
        settings.default_exponent, ge=settings.min_exponent, le=settings.max_exponent
    )
    start_at: int = Field(0, ge=0)


class SolveResponse(BaseModel):
    number: int
    took: int = Field(..., description="Search time in milliseconds")
    took_human: str
