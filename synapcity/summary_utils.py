"""
Parsing utilities for AI summarization responses.

Gemini video summaries come back as free text with TITLE:, TAGS: and
SUMMARY: labels. Formatting problems never fail a request: when the labels
are missing the raw response is used as the summary.
"""

import re
from typing import Dict, List

DEFAULT_VIDEO_SUMMARY = 'Unable to generate summary for this video.'

# A label counts when it starts a line (any case, optional markdown bold) or
# appears mid-line in upper case, so "Book Summary: X" stays inside a title.
TITLE_LABEL = r'(?:(?im:^[ \t*]*title:)|\bTITLE:)'
TAGS_LABEL = r'(?:(?im:^[ \t*]*tags:)|\bTAGS:)'
SUMMARY_LABEL = r'(?:(?im:^[ \t*]*summary:)|\bSUMMARY:)'

# Each pattern is independent of the others being present.
TITLE_PATTERN = re.compile(
    TITLE_LABEL + r'[*\s]*(?!(?i:tags:|summary:))(.+?)(?:\n|\bTAGS:|\bSUMMARY:|\Z)'
)
TAGS_PATTERN = re.compile(TAGS_LABEL + r'[*\s]*(?!(?i:summary:))(.+?)(?:\n|\bSUMMARY:|\Z)')
SUMMARY_PATTERN = re.compile(SUMMARY_LABEL + r'[*\s]*([\s\S]+)')


def default_video_title(video_id: str) -> str:
    return f"YouTube Video - {video_id}"


def default_video_summary(video_id: str) -> Dict:
    """Placeholder summary used when the video backend is unavailable."""
    return {
        'title': default_video_title(video_id),
        'tags': [],
        'summary': DEFAULT_VIDEO_SUMMARY,
        'parsed': False,
    }


def _strip_markup(value: str) -> str:
    # Closing bold markers end up in the capture when the label opened them
    return value.strip().strip('*').strip()


def parse_tags(tags_text: str) -> List[str]:
    """Split a comma separated tag list, dropping empty entries."""
    if not tags_text:
        return []
    return [tag.strip() for tag in tags_text.split(',') if tag.strip()]


def parse_video_summary(response_text: str, video_id: str) -> Dict:
    """
    Parse a labeled Gemini response into title, tags and summary.

    Args:
        response_text: Raw text returned by Gemini
        video_id: YouTube video ID, used for the placeholder title

    Returns:
        Dict with:
            title: str - extracted title or "YouTube Video - <id>"
            tags: list - extracted tags or []
            summary: str - text after SUMMARY:, else the whole response
            parsed: bool - True if a SUMMARY: section was found
    """
    text = response_text or ''
    result = {
        'title': default_video_title(video_id),
        'tags': [],
        'summary': text.strip(),
        'parsed': False,
    }

    title_match = TITLE_PATTERN.search(text)
    title = _strip_markup(title_match.group(1)) if title_match else ''
    if title:
        result['title'] = title

    tags_match = TAGS_PATTERN.search(text)
    if tags_match:
        result['tags'] = parse_tags(_strip_markup(tags_match.group(1)))

    summary_match = SUMMARY_PATTERN.search(text)
    if summary_match and summary_match.group(1).strip():
        result['summary'] = summary_match.group(1).strip()
        result['parsed'] = True

    return result


def extract_text_blocks(content_blocks) -> str:
    """Join the text-bearing blocks of an Anthropic message response."""
    parts = []
    for block in content_blocks or []:
        if getattr(block, 'type', None) == 'text':
            parts.append(block.text)
    return '\n'.join(parts).strip()
