"""FastAPI web application for siemgen."""

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import Field

from siemgen import __version__
from siemgen.core import RuleGenerator
from siemgen.errors import GenerationError
from siemgen.models import ApiConfigRequest, GenerationRequest, Provider, RuleGenerationCreate
from siemgen.storage import MemStorage, RuleStorage

logger = logging.getLogger("siemgen.web")

router = APIRouter(prefix="/api")

PROVIDER_NAMES = {
    Provider.ANTHROPIC: "Anthropic",
    Provider.OPENAI: "OpenAI",
    Provider.AZURE: "Azure OpenAI",
    Provider.GROQ: "Groq",
}


class GenerateRulesBody(GenerationRequest):
    """Request body for rule generation."""
    use_case: str = Field(..., min_length=10, description="Natural language detection use case")


def _generator(request: Request) -> RuleGenerator:
    return request.app.state.generator


def _storage(request: Request) -> RuleStorage:
    return request.app.state.storage


async def validation_error_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    """Report body validation failures as 400 without echoing input values."""
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return ORJSONResponse(
        status_code=400,
        content={"message": "Invalid request", "error": errors},
    )


@router.post("/generate-rules")
async def generate_rules(body: GenerateRulesBody, request: Request):
    """Generate a Sigma rule and KQL query, then store them."""
    try:
        result = await _generator(request).generate(body)
    except GenerationError as e:
        logger.error("Rule generation error: %s", e)
        return ORJSONResponse(status_code=400, content={"message": str(e)})

    record = await _storage(request).create_rule_generation(
        RuleGenerationCreate.from_result(body, result)
    )

    return {"id": record.id, **result.model_dump(mode="json", by_alias=True)}


@router.post("/test-connection")
async def test_connection(body: ApiConfigRequest, request: Request):
    """Check that a provider accepts a key."""
    is_valid = await _generator(request).test_connection(body.provider, body.api_key)
    return {
        "success": is_valid,
        "message": "API connection successful" if is_valid else "API connection failed",
    }


@router.get("/rules/{rule_generation_id}")
async def get_rule(rule_generation_id: str, request: Request):
    """Fetch a stored rule generation."""
    try:
        record_id = int(rule_generation_id)
    except ValueError:
        record = None
    else:
        record = await _storage(request).get_rule_generation(record_id)
    if record is None:
        return ORJSONResponse(status_code=404, content={"message": "Rule generation not found"})
    return record.model_dump(mode="json", by_alias=True)


@router.get("/providers")
async def get_providers(request: Request):
    """List LLM providers and their default models."""
    generator = _generator(request)
    supported = set(generator.supported_providers)
    return {
        "providers": [
            {
                "id": provider.value,
                "name": PROVIDER_NAMES[provider],
                "model": generator.settings.model_for(provider),
                "available": provider in supported,
            }
            for provider in Provider
        ]
    }


def create_app(
    generator: Optional[RuleGenerator] = None,
    storage: Optional[RuleStorage] = None,
) -> FastAPI:
    """Build the application around a generator and a store."""
    app = FastAPI(
        title="siemgen",
        description="Generate Sigma rules and Sentinel KQL queries from detection use cases",
        version=__version__,
        default_response_class=ORJSONResponse,
    )
    app.state.generator = generator or RuleGenerator()
    app.state.storage = storage or MemStorage()

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


app = create_app()
