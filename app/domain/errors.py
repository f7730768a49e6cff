"""Error taxonomy for the recommendation core.

Only ``ClientInputError`` and ``UpstreamDataError`` ever reach an HTTP caller.
``ExplanationServiceError`` and its subclasses are raised by LLM adapters and
absorbed by the explanation client; ``PartialAggregationFailure`` marks a
single candidate that is dropped from a response.
"""


class RecommendationError(Exception):
    """Base class for all errors raised by the recommendation core."""


class ClientInputError(RecommendationError):
    """Missing or invalid request fields."""


class UpstreamDataError(RecommendationError):
    """The backing store failed to read or write."""


class ExplanationServiceError(RecommendationError):
    """The generative-text service did not produce a usable answer."""


class ModelNotFoundError(ExplanationServiceError):
    """The configured model / API version does not exist (HTTP 404)."""


class RetryableServiceError(ExplanationServiceError):
    """Transient failure: rate limited, server error, or dropped connection."""


class ExplanationTimeoutError(ExplanationServiceError):
    """The request exceeded its per-attempt time budget."""


class PartialAggregationFailure(RecommendationError):
    """One candidate's explanation pipeline failed outside the client."""

    def __init__(self, product_id: str, cause: BaseException) -> None:
        super().__init__(f"Explanation pipeline failed for product {product_id}: {cause}")
        self.product_id = product_id
        self.cause = cause
