import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from content_forge.api.schemas import ErrorResponse, GenerateRequest, GenerateResponse, UsageResponse
from content_forge.config import Settings, get_settings
from content_forge.errors import QuotaExceededError, StoreError
from content_forge.providers.llm.gemini import GeminiGenerator
from content_forge.providers.store.supabase import SupabaseProfileStore
from content_forge.quota.gate import QuotaGate
from content_forge.service.generator import GenerateService
from content_forge.workflow.document import DocumentPipeline

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

MISSING_PARAMS_MESSAGE = "Missing required parameters (userId or topic)."
PROFILE_ERROR_MESSAGE = "Error accessing user profile data."


def build_service(settings: Settings | None = None) -> GenerateService:
    settings = settings or get_settings()
    gate = QuotaGate(SupabaseProfileStore(settings))
    pipeline = DocumentPipeline(GeminiGenerator(settings), settings)
    return GenerateService(gate=gate, pipeline=pipeline)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def create_app(service: GenerateService | None = None) -> FastAPI:
    app = FastAPI(title="content-forge", version="0.1.0")
    app.state.service = service or build_service()

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = sorted({".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()})
        logger.info("api.invalid_request path=%s fields=%s", request.url.path, fields)
        return _error(400, f"Invalid request body: {', '.join(field for field in fields if field) or 'body'}.")

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok"}

    @app.post(
        "/api/generate",
        response_model=GenerateResponse,
        responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def generate(req: GenerateRequest, request: Request):
        user_id = (req.user_id or "").strip()
        topic = (req.topic or "").strip()
        if not user_id or not topic:
            return _error(400, MISSING_PARAMS_MESSAGE)

        service: GenerateService = request.app.state.service
        try:
            result = await service.generate(
                user_id=user_id,
                topic=topic,
                doc_type=req.doc_type,
                tone=req.tone,
                sections_count=req.sections_count,
            )
        except QuotaExceededError as exc:
            return _error(403, str(exc))
        except StoreError as exc:
            logger.error("api.profile_error user=%s detail=%s", user_id, str(exc))
            return _error(500, PROFILE_ERROR_MESSAGE)
        except Exception as exc:
            logger.error("api.generate_failed user=%s type=%s detail=%s", user_id, exc.__class__.__name__, str(exc))
            return _error(500, f"Generation failed: {exc}.")
        return GenerateResponse(**result)

    @app.get(
        "/api/usage/{user_id}",
        response_model=UsageResponse,
        responses={500: {"model": ErrorResponse}},
    )
    async def usage(user_id: str, request: Request):
        service: GenerateService = request.app.state.service
        try:
            summary = await service.usage(user_id)
        except StoreError as exc:
            logger.error("api.profile_error user=%s detail=%s", user_id, str(exc))
            return _error(500, PROFILE_ERROR_MESSAGE)
        except Exception as exc:
            logger.error("api.usage_failed user=%s type=%s detail=%s", user_id, exc.__class__.__name__, str(exc))
            return _error(500, str(exc))
        return UsageResponse(**summary)

    return app


app = create_app()
