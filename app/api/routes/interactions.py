"""Interaction recording routes."""

from fastapi import APIRouter, Depends, status

from app.api.schemas import (
    ErrorResponse,
    InteractionCreatedResponse,
    InteractionRequest,
    InteractionResponse,
)
from app.dependencies import get_interaction_service
from app.services.interaction import InteractionService

router = APIRouter(tags=["Interactions"])


@router.post(
    "/interactions",
    response_model=InteractionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def record_interaction(
    data: InteractionRequest,
    service: InteractionService = Depends(get_interaction_service),
) -> InteractionCreatedResponse:
    """Record a view, add-to-cart or purchase."""
    event = await service.record(
        data.user_id,
        data.product_id,
        data.action_type,
        name=data.name,
        email=data.email,
    )
    return InteractionCreatedResponse(
        interaction=InteractionResponse(
            user_id=event.user_id,
            product_id=event.product_id,
            action_type=event.action_kind,
            timestamp=event.observed_at,
        )
    )
