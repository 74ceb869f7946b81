"""
Error types for the link enrichment pipeline.

Only ValidationError and FetchError ever reach the caller as failures.
SummarizationError and BatchError are recovered locally.
"""


class EnrichmentError(Exception):
    """Base class for enrichment pipeline errors."""

    stage = 'processing'
    recoverable = False

    def to_dict(self) -> dict:
        return {
            'stage': self.stage,
            'message': str(self),
            'recoverable': self.recoverable,
        }


class ValidationError(EnrichmentError):
    """Malformed or missing input (bad URL, missing query)."""

    stage = 'validation'


class FetchError(EnrichmentError):
    """Content source unreachable or returned a non-success status."""

    stage = 'fetch'

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class SummarizationError(EnrichmentError):
    """AI backend transport, auth or quota failure."""

    stage = 'ai_analysis'
    recoverable = True


class BatchError(EnrichmentError):
    """One relevance-search batch failed."""

    stage = 'ai_search'
    recoverable = True

    def __init__(self, message: str, batch_number: int = None):
        super().__init__(message)
        self.batch_number = batch_number
