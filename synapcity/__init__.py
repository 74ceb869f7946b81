"""Shared utilities for the Synapcity link enricher."""

from .url_utils import (
    YOUTUBE_ID_LENGTH,
    is_valid_url,
    is_youtube_url,
    extract_youtube_video_id,
    classify_url,
    canonical_video_url,
    youtube_thumbnail_url,
    detect_source,
    extract_domain,
)

from .content_utils import (
    MAX_CONTENT_LENGTH,
    extract_link_preview,
    extract_main_content,
    normalize_whitespace,
    remove_noise,
)

from .summary_utils import (
    DEFAULT_VIDEO_SUMMARY,
    default_video_summary,
    parse_video_summary,
    extract_text_blocks,
)

from .search_utils import (
    SEARCH_BATCH_SIZE,
    filter_items_with_notes,
    chunk_items,
    build_search_prompt,
    parse_matching_ids,
)

from .errors import (
    EnrichmentError,
    ValidationError,
    FetchError,
    SummarizationError,
    BatchError,
)

__all__ = [
    # URL utilities
    'YOUTUBE_ID_LENGTH',
    'is_valid_url',
    'is_youtube_url',
    'extract_youtube_video_id',
    'classify_url',
    'canonical_video_url',
    'youtube_thumbnail_url',
    'detect_source',
    'extract_domain',
    # Content utilities
    'MAX_CONTENT_LENGTH',
    'extract_link_preview',
    'extract_main_content',
    'normalize_whitespace',
    'remove_noise',
    # Summary utilities
    'DEFAULT_VIDEO_SUMMARY',
    'default_video_summary',
    'parse_video_summary',
    'extract_text_blocks',
    # Search utilities
    'SEARCH_BATCH_SIZE',
    'filter_items_with_notes',
    'chunk_items',
    'build_search_prompt',
    'parse_matching_ids',
    # Errors
    'EnrichmentError',
    'ValidationError',
    'FetchError',
    'SummarizationError',
    'BatchError',
]
