"""Recommendation routes."""

from fastapi import APIRouter, Depends, Query

from app.api.schemas import (
    ErrorResponse,
    ProductResponse,
    RecommendationItem,
    RecommendationsResponse,
)
from app.dependencies import get_recommendation_service
from app.services.recommendation import RecommendationService

router = APIRouter(tags=["Recommendations"])


@router.get(
    "/recommendations",
    response_model=RecommendationsResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_recommendations(
    user_id: str | None = Query(default=None),
    service: RecommendationService = Depends(get_recommendation_service),
) -> RecommendationsResponse:
    """Get personalized product suggestions, each with an explanation."""
    results = await service.recommend(user_id or "")
    return RecommendationsResponse(
        recommendations=[
            RecommendationItem(
                product=ProductResponse.model_validate(rec.product),
                explanation=rec.explanation,
            )
            for rec in results
        ]
    )
