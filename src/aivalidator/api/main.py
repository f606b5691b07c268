"""FastAPI application exposing AiValidator over HTTP."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from aivalidator.config import get_config
from aivalidator.errors import CastError, ConfigurationError, ProviderError
from aivalidator.schemas import AttemptRecord, TokenUsage
from aivalidator.services import AiValidator


# Request/Response models
class ValidateRequest(BaseModel):
    prompt: str
    rules: Dict[str, Any]
    messages: Dict[str, str] = Field(default_factory=dict)
    provider: Optional[str] = None
    max_attempts: Optional[int] = Field(default=None, ge=1)
    options: Dict[str, Any] = Field(default_factory=dict)


class ValidateResponse(BaseModel):
    success: bool
    data: Optional[Dict[str, Any]] = None
    attempt_count: int
    attempts: List[AttemptRecord]
    usage: TokenUsage
    error: Optional[str] = None


# Application state
class AppState:
    def __init__(self, validator: Optional[AiValidator] = None):
        self.config = get_config()
        self.validator = validator or AiValidator(config=self.config)

    def close(self):
        self.validator.providers.close()


state: Optional[AppState] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    global state
    if state is None:
        state = AppState()
    yield
    if state:
        state.close()
        state = None


app = FastAPI(
    title="AiValidator API",
    description="Validate, retry and correct structured JSON output from LLM providers.",
    version="0.1.0",
    lifespan=lifespan,
)


def get_state() -> AppState:
    """Get application state."""
    if state is None:
        raise HTTPException(status_code=500, detail="Application not initialized")
    return state


@app.post("/validate", response_model=ValidateResponse)
async def validate(request: ValidateRequest) -> ValidateResponse:
    """Send a prompt and validate the JSON response against the given rules."""
    s = get_state()

    try:
        # The retry loop blocks (provider calls, backoff), keep it off the event loop
        result = await run_in_threadpool(
            s.validator.validate_with_rules,
            request.prompt,
            request.rules,
            request.options,
            messages=request.messages,
            provider=request.provider,
            max_attempts=request.max_attempts,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except CastError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ValidateResponse(
        success=result.success,
        data=result.data,
        attempt_count=result.attempt_count,
        attempts=list(result.attempts),
        usage=result.usage,
        error=result.error,
    )


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
