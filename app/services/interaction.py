"""Interaction recording with lazy user creation."""

import logging

from app.domain.errors import ClientInputError, UpstreamDataError
from app.domain.models import ACTION_TYPES
from app.ports.catalog import CatalogPort, InteractionEvent

logger = logging.getLogger(__name__)


class InteractionService:
    """Validates and persists user interactions."""

    def __init__(self, catalog: CatalogPort) -> None:
        self._catalog = catalog

    async def record(
        self,
        user_id: str | None,
        product_id: str | None,
        action_type: str | None,
        name: str | None = None,
        email: str | None = None,
    ) -> InteractionEvent:
        """
        Record an interaction.

        Raises ClientInputError for missing fields or an unknown action type.
        A user unknown to the store is created first; failing to create it is
        logged and does not block the interaction itself.
        """
        if not user_id or not product_id or not action_type:
            raise ClientInputError("Missing required fields: user_id, product_id, action_type")
        if action_type not in ACTION_TYPES:
            raise ClientInputError(
                "Invalid action_type. Must be: view, add_to_cart, or purchase"
            )

        try:
            await self._catalog.ensure_user(
                user_id,
                name=name or email or "Unknown User",
                email=email or "",
            )
        except UpstreamDataError as exc:
            logger.error("Error creating user %s: %s", user_id, exc)

        return await self._catalog.record_interaction(user_id, product_id, action_type)
