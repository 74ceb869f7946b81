"""
URL classification utilities for the Synapcity link enricher.

Decides whether a saved link is a YouTube video, LinkedIn post or plain
webpage, and extracts the YouTube video ID when there is one.
"""

import re
from typing import Dict, Optional
from urllib.parse import urlparse

# YouTube video IDs are always exactly this long
YOUTUBE_ID_LENGTH = 11

YOUTUBE_DOMAINS = ['youtube.com', 'youtu.be']
LINKEDIN_POST_PATTERNS = ['linkedin.com/posts/', 'linkedin.com/feed/update/']

# Matches: watch?v=ID, &v=ID, youtu.be/ID, embed/ID, v/ID, u/x/ID, shorts/ID
YOUTUBE_ID_PATTERN = re.compile(
    r'^.*(youtu\.be/|v/|u/\w/|embed/|shorts/|watch\?v=|&v=)([^#&?]*).*'
)


def _hostname(url: str) -> Optional[str]:
    try:
        return urlparse(url).hostname
    except (ValueError, AttributeError):
        return None


def is_valid_url(url: str) -> bool:
    """Check that url is an absolute http(s) URL with a host."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc) and bool(parsed.hostname)


def is_youtube_url(url: str) -> bool:
    """Check if the URL host belongs to YouTube."""
    hostname = _hostname(url)
    if not hostname:
        return False
    return any(domain in hostname.lower() for domain in YOUTUBE_DOMAINS)


def extract_youtube_video_id(url: str) -> Optional[str]:
    """
    Extract the 11-character video ID from a YouTube URL.

    Returns None when no ID is found or the captured ID has the wrong length.
    """
    if not url:
        return None
    match = YOUTUBE_ID_PATTERN.match(url)
    if match and len(match.group(2)) == YOUTUBE_ID_LENGTH:
        return match.group(2)
    return None


def classify_url(url: str) -> Dict:
    """
    Classify a URL as video platform or not.

    Returns:
        Dict with:
            is_video_platform: bool
            video_id: str or None
    """
    if not is_valid_url(url) or not is_youtube_url(url):
        return {'is_video_platform': False, 'video_id': None}

    return {
        'is_video_platform': True,
        'video_id': extract_youtube_video_id(url),
    }


def canonical_video_url(video_id: str) -> str:
    """Normalized watch URL used to reference a video regardless of the original URL shape."""
    return f"https://www.youtube.com/watch?v={video_id}"


def youtube_thumbnail_url(video_id: str) -> str:
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


def detect_source(url: str) -> str:
    """Detect the source type (youtube, linkedin, link) from a URL."""
    lowered = (url or '').lower()
    if is_youtube_url(url):
        return 'youtube'
    for pattern in LINKEDIN_POST_PATTERNS:
        if pattern in lowered:
            return 'linkedin'
    return 'link'


def extract_domain(url: str) -> Optional[str]:
    """Extract the domain name from a URL, without a leading 'www.'."""
    hostname = _hostname(url)
    if not hostname:
        return None
    if hostname.startswith('www.'):
        hostname = hostname[4:]
    return hostname
