"""Review analysis API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from review_pulse.api.v1.schemas import (
    AnalysisResponse,
    AnalyzeTextRequest,
    ReviewCountResponse,
    TokenStatus,
    TokenUpdateRequest,
)
from review_pulse.services.collaborators.review_source import NoReviewsAvailableError
from review_pulse.services.orchestrator import AnalysisInProgressError, Orchestrator
from review_pulse.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["analysis"])


def get_orchestrator(request: Request) -> Orchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Analysis service is not ready")
    return orchestrator


@router.get("/reviews", response_model=ReviewCountResponse)
async def count_reviews(orchestrator: Orchestrator = Depends(get_orchestrator)) -> ReviewCountResponse:
    """Number of reviews loaded for sampling."""
    return ReviewCountResponse(count=len(orchestrator.context.reviews))


@router.post("/analysis/random", response_model=AnalysisResponse)
async def analyze_random_review(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> AnalysisResponse:
    """Sample a random review, classify it and decide the business action."""
    try:
        outcome = await orchestrator.analyze_random()
    except NoReviewsAvailableError as exc:
        raise HTTPException(
            status_code=404, detail="No reviews available. Please try again later."
        ) from exc
    except AnalysisInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return AnalysisResponse.from_outcome(outcome)


@router.post("/analysis", response_model=AnalysisResponse)
async def analyze_text(
    body: AnalyzeTextRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> AnalysisResponse:
    """Classify the given review text and decide the business action."""
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Review text must not be blank")
    try:
        outcome = await orchestrator.analyze(body.text)
    except AnalysisInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return AnalysisResponse.from_outcome(outcome)


@router.get("/token", response_model=TokenStatus)
async def token_status(orchestrator: Orchestrator = Depends(get_orchestrator)) -> TokenStatus:
    """Whether an inference API token is configured. The token is never echoed."""
    return TokenStatus(configured=orchestrator.context.has_token)


@router.put("/token", response_model=TokenStatus)
async def update_token(
    body: TokenUpdateRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> TokenStatus:
    orchestrator.context.set_token(body.token)
    logger.info("API token updated", configured=orchestrator.context.has_token)
    return TokenStatus(configured=orchestrator.context.has_token)


@router.delete("/token", response_model=TokenStatus)
async def clear_token(orchestrator: Orchestrator = Depends(get_orchestrator)) -> TokenStatus:
    orchestrator.context.clear_token()
    logger.info("API token cleared")
    return TokenStatus(configured=False)
