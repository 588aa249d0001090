"""Generation router - study material generation, naming, PDF download and usage."""
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from study_assistant.core.exceptions import (
    MalformedResponseError,
    NoTextAvailableError,
    NotFoundError,
    ProviderUnavailableError,
    RateLimitExceededError,
    RenderError,
    StudyAssistantError,
)
from study_assistant.routers.dependencies import (
    get_content_repository,
    get_generator,
    get_namer,
    get_study_set_repository,
    get_usage_ledger,
)
from study_assistant.schemas.generation import (
    GenerateContentBody,
    GeneratedContentResponse,
    GenerationRequest,
    SuggestNameBody,
    SuggestNameResponse,
)
from study_assistant.schemas.providers import UsageResponse
from study_assistant.services.ai import ContentGenerationService, UsageLedger
from study_assistant.services.ai.generators import StudySetNamer
from study_assistant.services.renderer import render_content
from study_assistant.services.storage.base import ContentRepository, StudySetRepository

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS = {
    NotFoundError: 404,
    NoTextAvailableError: 400,
    RateLimitExceededError: 429,
    MalformedResponseError: 502,
    ProviderUnavailableError: 503,
    RenderError: 500,
}


def to_http_error(error: StudyAssistantError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


@router.post("/study-sets/{test_id}/generate", response_model=GeneratedContentResponse)
async def generate_content(
    test_id: str,
    body: GenerateContentBody,
    service: ContentGenerationService = Depends(get_generator),
):
    """Generate flashcards, a practice test or a summary from a study set's documents."""
    request = GenerationRequest(
        test_id=test_id,
        teacher_instructions=body.teacher_instructions,
        options=body.options,
    )
    try:
        content = await service.generate(request)
    except StudyAssistantError as e:
        logger.warning(f"Generation failed for study set {test_id}: {e}")
        raise to_http_error(e)

    return GeneratedContentResponse(
        id=content.id,
        test_id=content.test_id,
        kind=content.kind,
        title=content.title,
        generated_at=content.generated_at,
        flashcard_count=len(content.flashcards),
    )


@router.post("/study-sets/{test_id}/suggest-name", response_model=SuggestNameResponse)
async def suggest_name(
    test_id: str,
    body: SuggestNameBody = SuggestNameBody(),
    namer: StudySetNamer = Depends(get_namer),
):
    """Suggest a name for a study set; falls back to a dated default."""
    name = await namer.suggest_name(test_id, body.document_ids)
    return SuggestNameResponse(name=name)


@router.get("/contents/{content_id}/pdf")
async def download_content_pdf(
    content_id: str,
    contents: ContentRepository = Depends(get_content_repository),
    study_sets: StudySetRepository = Depends(get_study_set_repository),
):
    """Render generated content as a PDF document."""
    try:
        content = await contents.load(content_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        study_set_name = (await study_sets.load(content.test_id)).name
    except NotFoundError:
        study_set_name = None

    try:
        pdf_bytes = await asyncio.get_event_loop().run_in_executor(
            None, render_content, content, study_set_name
        )
    except RenderError as e:
        raise to_http_error(e)

    filename = f"{content.kind.value.lower()}-{content.id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/usage/today", response_model=UsageResponse)
async def get_today_usage(ledger: UsageLedger = Depends(get_usage_ledger)):
    """Get today's token usage against the daily budget."""
    usage = await ledger.today_usage()
    return UsageResponse(
        day=usage.day,
        input_tokens=usage.input_tokens,
        output_tokens=usage.output_tokens,
        total_tokens=usage.total_tokens,
        call_count=usage.call_count,
        daily_limit=ledger.daily_limit,
        rate_limiting_enabled=ledger.enabled,
    )
