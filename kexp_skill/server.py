"""
HTTP endpoint for Alexa skill requests.

POST /alexa: parse -> verify -> dispatch -> render.
Verification failures become a bare 400; the reason only goes to the logs.
"""
import asyncio
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from logging_setup import get_logger, Component

from .certificates import CertificateChainChecker, SignatureChecker, default_trust_store
from .config import SkillConfig, get_config
from .dispatcher import dispatch
from .errors import VerificationError
from .models import LiveStream, RequestType, SkillRequestEnvelope, Unhandled
from .responses import render
from .verifier import verify

logger = get_logger(Component.SKILL_SERVER)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the trust store before the first request needs it."""
    await asyncio.to_thread(default_trust_store)
    yield


app = FastAPI(title="KEXP Alexa Skill", lifespan=lifespan)


def get_signature_checker(config: SkillConfig = Depends(get_config)) -> SignatureChecker:
    return CertificateChainChecker(timeout_seconds=config.cert_timeout_seconds)


@app.exception_handler(VerificationError)
async def verification_error_handler(request: Request, exc: VerificationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "invalid_request"})


@app.post("/alexa")
async def handle_alexa(
    request: Request,
    config: SkillConfig = Depends(get_config),
    checker: SignatureChecker = Depends(get_signature_checker),
):
    """
    Alexa skill endpoint.

    Returns 200 with the skill response, or 200 with a null body when the
    skill has nothing to say for the request.
    """
    # Starlette caches the body, so the raw bytes stay readable after this.
    body = await request.body()

    try:
        skill_request = SkillRequestEnvelope.model_validate_json(body)
    except ValidationError as e:
        logger.warning(
            "Request body is not a valid skill request",
            body_size=len(body),
            error_count=e.error_count(),
        )
        return JSONResponse(status_code=400, content={"error": "invalid_request"})

    request_id = skill_request.request.request_id
    result = await verify(
        request.headers,
        body,
        skill_request.request.timestamp,
        checker,
        tolerance_seconds=config.timestamp_tolerance_seconds,
        signature_timeout_seconds=config.cert_timeout_seconds,
        request_id=request_id,
    )
    if not result.valid:
        raise VerificationError(result.reason)

    req_logger = logger.with_request(request_id)
    request_type = skill_request.request_type
    req_logger.info(
        "Request received",
        request_type=skill_request.request.type,
    )
    if request_type is RequestType.INTENT and skill_request.request.intent:
        req_logger.info("Intent request", intent=skill_request.request.intent.name)
    elif request_type is RequestType.AUDIO_PLAYER:
        req_logger.info("AudioPlayer request", audio_request_type=skill_request.request.type)
    elif request_type is RequestType.SESSION_ENDED:
        req_logger.info("Session ended", end_reason=skill_request.request.reason)

    outgoing = dispatch(
        skill_request,
        LiveStream(url=config.stream_url, token=config.stream_token),
    )

    if isinstance(outgoing, Unhandled):
        req_logger.error(
            "Unhandled request",
            payload=body.decode("utf-8", errors="replace"),
        )
        return JSONResponse(status_code=200, content=None)

    return JSONResponse(status_code=200, content=render(outgoing).to_json_dict())


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "component": "kexp_skill"}
