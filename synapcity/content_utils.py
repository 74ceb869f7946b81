"""
HTML extraction utilities for the Synapcity link enricher.

Turns a parsed webpage into a link preview: title, description, image and
the cleaned body text that is handed to the summarizer.
"""

import re
from typing import Dict, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

# Upper bound on body text sent to the summarizer
MAX_CONTENT_LENGTH = 50000

DEFAULT_TITLE = 'Untitled'

# Elements that never carry article content
NOISE_SELECTOR = 'script, style, nav, footer, header, aside, .advertisement, .ad, .sidebar'

# Candidate main content containers, first match in document order wins
MAIN_CONTENT_SELECTOR = 'main, article, .content, .post, .article'


def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find('meta', attrs=attrs)
    if tag and tag.get('content'):
        return tag['content'].strip()
    return ''


def _tag_text(soup: BeautifulSoup, name: str) -> str:
    tag = soup.find(name)
    return normalize_whitespace(tag.get_text()) if tag else ''


def _first_non_empty(*values) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def extract_title(soup: BeautifulSoup) -> str:
    """Title from <title>, og:title or the first <h1>, else 'Untitled'."""
    return _first_non_empty(
        _tag_text(soup, 'title'),
        _meta_content(soup, property='og:title'),
        _tag_text(soup, 'h1'),
    ) or DEFAULT_TITLE


def extract_description(soup: BeautifulSoup) -> str:
    return _first_non_empty(
        _meta_content(soup, property='og:description'),
        _meta_content(soup, name='description'),
    ) or ''


def extract_image(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    """
    Preview image from og:image, twitter:image or the first <img>.

    Relative image URLs are resolved against the page URL.
    """
    first_img = soup.find('img', src=True)
    image = _first_non_empty(
        _meta_content(soup, property='og:image'),
        _meta_content(soup, name='twitter:image'),
        first_img['src'].strip() if first_img else '',
    )
    if not image:
        return None
    return urljoin(page_url, image)


def remove_noise(soup: BeautifulSoup) -> None:
    """Remove scripts, navigation, ads and sidebars from the tree in place."""
    for element in soup.select(NOISE_SELECTOR):
        # Nested matches are already gone once their parent is decomposed
        if not element.decomposed:
            element.decompose()


def normalize_whitespace(text: str) -> str:
    if not text:
        return ''
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def extract_main_content(soup: BeautifulSoup, max_length: int = MAX_CONTENT_LENGTH) -> str:
    """
    Extract cleaned body text, preferring the main content container.

    Call after remove_noise(). Whitespace is collapsed before truncation.
    """
    container = soup.select_one(MAIN_CONTENT_SELECTOR) or soup.body or soup
    text = container.get_text(separator=' ')
    return normalize_whitespace(text)[:max_length]


def extract_link_preview(html: str, page_url: str) -> Dict:
    """
    Build a link preview from raw HTML.

    Metadata is read before noise removal so header images and titles survive.

    Returns:
        Dict with title, description, image (or None) and body_text
    """
    soup = BeautifulSoup(html or '', 'html.parser')

    preview = {
        'title': extract_title(soup),
        'description': extract_description(soup),
        'image': extract_image(soup, page_url),
    }

    remove_noise(soup)
    preview['body_text'] = extract_main_content(soup)

    return preview
