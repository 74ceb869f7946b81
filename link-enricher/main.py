"""
Link Enricher Cloud Function

Backend for the Synapcity dashboard and browser extension.

Responsibilities:
- Classify saved links (YouTube video vs. webpage)
- Fetch webpages and extract a link preview (title, description, image, text)
- Summarize YouTube videos with Gemini (title, tags, summary)
- Summarize webpage text with Claude
- AI search: ask Gemini which saved items' notes relate to a query

Does NOT:
- Write to Supabase (the frontend/extension does that)
- Authenticate users
"""

import functions_framework
import anthropic
import google.generativeai as genai
import requests
import json
import os
import sys
import traceback

# Add synapcity package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from synapcity.url_utils import (
    is_valid_url,
    classify_url,
    canonical_video_url,
    youtube_thumbnail_url,
    detect_source,
    extract_domain,
)
from synapcity.content_utils import extract_link_preview
from synapcity.summary_utils import default_video_summary, parse_video_summary, extract_text_blocks
from synapcity.search_utils import (
    SEARCH_BATCH_SIZE,
    filter_items_with_notes,
    chunk_items,
    build_search_prompt,
    parse_matching_ids,
)
from synapcity.errors import ValidationError, FetchError, SummarizationError, BatchError

# Configuration
GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.5-flash')
ANTHROPIC_API_KEY = os.environ.get('ANTHROPIC_API_KEY') or os.environ.get('ANTHROPIC_AUTH_TOKEN')
ANTHROPIC_BASE_URL = os.environ.get('ANTHROPIC_BASE_URL')
CLAUDE_MODEL = os.environ.get('CLAUDE_MODEL', 'claude-3-5-sonnet-20241022')
CLAUDE_MAX_TOKENS = 1024
FETCH_TIMEOUT = int(os.environ.get('FETCH_TIMEOUT', '30'))
AI_TIMEOUT = int(os.environ.get('AI_TIMEOUT', '60'))
USER_AGENT = os.environ.get(
    'USER_AGENT',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

# Webpages with less body text than this use their meta description as summary
MIN_SUMMARY_CONTENT_LENGTH = 100

VIDEO_DESCRIPTION = 'YouTube video summary'

# AI backend clients, created on first use and reused across requests
_client_cache = {'gemini': None, 'claude': None}

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
    'Access-Control-Max-Age': '3600'
}
RESPONSE_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Content-Type': 'application/json'
}

VIDEO_SUMMARY_PROMPT = """Please watch and analyze this YouTube video.

Provide the following information in a structured format:

TITLE: [Provide a clear, descriptive title for this video (max 100 characters)]

TAGS: [Provide 5-10 relevant tags separated by commas (e.g., technology, tutorial, coding, web development)]

SUMMARY:
Provide a comprehensive and well-structured summary that includes:

1. Main Topic

2. Key Points (3-5)

3. Important Details

4. Takeaways

Format your response exactly as shown above with TITLE:, TAGS:, and SUMMARY: labels."""


def get_gemini_model():
    """Get the shared Gemini model, configuring the API on first use."""
    if _client_cache['gemini'] is None:
        if not GEMINI_API_KEY:
            raise SummarizationError('GEMINI_API_KEY not configured')
        genai.configure(api_key=GEMINI_API_KEY)
        _client_cache['gemini'] = genai.GenerativeModel(GEMINI_MODEL)
        print(f"[Gemini] Model initialized: {GEMINI_MODEL}")
    return _client_cache['gemini']


def get_claude_client():
    """Get the shared Anthropic client."""
    if _client_cache['claude'] is None:
        if not ANTHROPIC_API_KEY:
            raise SummarizationError('ANTHROPIC_API_KEY not configured')
        _client_cache['claude'] = anthropic.Anthropic(
            api_key=ANTHROPIC_API_KEY,
            base_url=ANTHROPIC_BASE_URL or None,
            timeout=AI_TIMEOUT,
        )
    return _client_cache['claude']


def fetch_webpage(url: str) -> dict:
    """
    Fetch a webpage and extract its link preview.

    Returns:
        Dict with title, description, image and body_text

    Raises:
        FetchError: on timeout, transport failure or non-success status
    """
    headers = {
        'User-Agent': USER_AGENT,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
    }

    try:
        response = requests.get(url, headers=headers, timeout=FETCH_TIMEOUT, allow_redirects=True)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise FetchError('Request timed out') from e
    except requests.exceptions.HTTPError as e:
        status_code = e.response.status_code
        raise FetchError(f'HTTP error: {status_code}', status_code=status_code) from e
    except requests.exceptions.RequestException as e:
        raise FetchError(f'Request failed: {str(e)}') from e

    return extract_link_preview(response.text, url)


def summarize_youtube_video(video_url: str, video_id: str, model=None) -> dict:
    """Summarize a YouTube video with Gemini.

    The video is passed by URL as file data, Gemini fetches it itself.
    Unparseable replies degrade to the raw text (parsed=False), only
    backend failures raise.

    Returns:
        dict with title, tags, summary, parsed
    """
    model = model or get_gemini_model()
    print(f"[Gemini] Starting summarization for video: {video_id} ({video_url})")

    try:
        video_part = genai.protos.Part(
            file_data=genai.protos.FileData(file_uri=video_url, mime_type='video/mp4')
        )
        response = model.generate_content(
            [video_part, VIDEO_SUMMARY_PROMPT],
            request_options={'timeout': AI_TIMEOUT}
        )
        full_response = response.text
    except Exception as e:
        print(f"[Gemini] Error summarizing video {video_id}: {e}")
        raise SummarizationError(f'Failed to summarize YouTube video with Gemini: {e}') from e

    print(f"[Gemini] Response received, length: {len(full_response)} characters")

    result = parse_video_summary(full_response, video_id)
    if not result['parsed']:
        print("[Gemini] No SUMMARY label found, using full response as summary")
    return result


def summarize_with_claude(text_content: str, url: str, client=None) -> str:
    """Summarize webpage text with Claude. Raises SummarizationError on failure."""
    client = client or get_claude_client()
    print(f"[Claude] Summarizing {len(text_content)} characters from {url}")

    prompt = f"""Please provide a concise summary of the following webpage content. Focus on the main points, key information, and important details. Keep the summary informative but brief (2-4 paragraphs, around 300-500 words).

URL: {url}

Content:
{text_content}

Please provide a well-structured summary that captures the essence of the content."""

    try:
        message = client.messages.create(
            model=CLAUDE_MODEL,
            max_tokens=CLAUDE_MAX_TOKENS,
            messages=[{'role': 'user', 'content': prompt}]
        )
    except Exception as e:
        print(f"[Claude] Error summarizing {url}: {e}")
        raise SummarizationError(f'Failed to summarize with Claude: {e}') from e

    return extract_text_blocks(message.content)


def search_batch(query: str, batch: list, model, batch_number: int) -> list:
    """Ask Gemini which items in one batch match the query."""
    prompt = build_search_prompt(query, batch)

    try:
        response = model.generate_content(prompt, request_options={'timeout': AI_TIMEOUT})
        response_text = response.text.strip()
    except Exception as e:
        raise BatchError(f'Gemini request failed: {e}', batch_number=batch_number) from e

    print(f"[AI Search] Gemini response: {response_text[:200]}")

    result = parse_matching_ids(response_text, batch)
    if not result['parsed']:
        print(f"[AI Search] No valid JSON array in batch {batch_number} response")
    if result['discarded']:
        print(f"[AI Search] Discarded unknown IDs from batch {batch_number}: {result['discarded']}")

    return result['ids']


def ai_search_items(query: str, items: list, model=None) -> list:
    """
    Find the items whose notes relate to the query.

    Items without notes are skipped. The rest are sent to Gemini in batches
    of SEARCH_BATCH_SIZE, one batch at a time. A failed batch is logged and
    skipped.

    Returns:
        List of matching item IDs, in batch order
    """
    eligible = filter_items_with_notes(items)
    if not eligible:
        print("[AI Search] No items with notes found")
        return []

    model = model or get_gemini_model()
    batches = list(chunk_items(eligible, SEARCH_BATCH_SIZE))
    print(f"[AI Search] Query: \"{query}\", {len(eligible)} items in {len(batches)} batches")

    matching_ids = []
    for batch_number, batch in enumerate(batches, start=1):
        try:
            batch_matches = search_batch(query, batch, model, batch_number)
        except BatchError as e:
            print(f"[AI Search] Error processing batch {batch_number}, skipping: {e}")
            continue

        matching_ids.extend(batch_matches)
        print(f"[AI Search] Batch {batch_number} completed. Found {len(batch_matches)} matches.")

    print(f"[AI Search] Completed. Total matches: {len(matching_ids)}")
    return matching_ids


def validate_url(url) -> str:
    """Return the trimmed URL or raise ValidationError."""
    if not url:
        raise ValidationError('URL is required')
    if not isinstance(url, str) or not is_valid_url(url):
        raise ValidationError('Invalid URL format')
    return url.strip()


def enrich_youtube_video(url: str, video_id: str, model=None) -> dict:
    """Build link data for a YouTube video. Summarization failures fall back to placeholders."""
    if not video_id:
        raise ValidationError('Could not extract video ID from URL')

    print(f"[Extract Link] Extracted video ID: {video_id}")

    try:
        video_data = summarize_youtube_video(canonical_video_url(video_id), video_id, model=model)
    except SummarizationError as e:
        print(f"[Extract Link] Gemini summarization error: {e}")
        video_data = default_video_summary(video_id)

    return {
        'url': url,
        'title': video_data['title'],
        'description': VIDEO_DESCRIPTION,
        'image': youtube_thumbnail_url(video_id),
        'summary': video_data['summary'],
        'tags': video_data['tags'],
        'videoId': video_id,
        'source': 'youtube',
        'domain': extract_domain(url),
    }


def enrich_webpage(url: str, client=None) -> dict:
    """Build link data for a regular webpage. Raises FetchError if the page can't be fetched."""
    preview = fetch_webpage(url)
    body_text = preview['body_text']
    description = preview['description'] or ''

    if len(body_text) > MIN_SUMMARY_CONTENT_LENGTH:
        try:
            summary = summarize_with_claude(body_text, url, client=client)
        except SummarizationError as e:
            print(f"[Extract Link] Claude summarization error: {e}")
            summary = description
    else:
        print(f"[Extract Link] Only {len(body_text)} characters of text, using description as summary")
        summary = description

    return {
        'url': url,
        'title': preview['title'],
        'description': description,
        'image': preview['image'],
        'summary': summary,
        'source': detect_source(url),
        'domain': extract_domain(url),
    }


def enrich_link(url, gemini_model=None, claude_client=None) -> tuple:
    """
    Turn a bare URL into link data.

    Returns:
        Tuple of (response body, HTTP status). Validation problems are 400,
        a failed webpage fetch is 500, everything else is 200 with
        best-effort fields.
    """
    print(f"[Extract Link] Received request for URL: {url}")

    try:
        url = validate_url(url)
        classification = classify_url(url)

        if classification['is_video_platform']:
            print(f"[Extract Link] Detected YouTube URL: {url}")
            data = enrich_youtube_video(url, classification['video_id'], model=gemini_model)
        else:
            data = enrich_webpage(url, client=claude_client)

    except ValidationError as e:
        print(f"[Extract Link] Validation failed: {e}")
        return {'success': False, 'error': str(e)}, 400
    except FetchError as e:
        print(f"[Extract Link] Fetch failed: {e}")
        return {'success': False, 'error': f'Failed to fetch webpage: {e}'}, 500

    print(f"[Extract Link] Sending response: title={data['title']!r}, summary length={len(data['summary'] or '')}")
    return {'success': True, 'data': data}, 200


def _json_response(body: dict, status: int = 200) -> tuple:
    return (json.dumps(body), status, RESPONSE_HEADERS)


def _request_json(request) -> dict:
    request_json = request.get_json(silent=True)
    return request_json if isinstance(request_json, dict) else {}


def handle_extract_link(request):
    """
    POST /api/extract-link

    Expected JSON input:
    {
        "url": "https://example.com/article"
    }
    """
    try:
        body, status = enrich_link(_request_json(request).get('url'))
        return _json_response(body, status)
    except Exception as e:
        print(f"[Extract Link] Error extracting link: {e}\n{traceback.format_exc()}")
        return _json_response({
            'success': False,
            'error': str(e) or 'Failed to extract link data'
        }, 500)


def handle_ai_search(request):
    """
    POST /api/ai-search

    Expected JSON input:
    {
        "query": "notes about rust lifetimes",
        "items": [{"id": "...", "title": "...", "notes": "..."}]
    }
    """
    request_json = _request_json(request)
    query = request_json.get('query')
    items = request_json.get('items')

    if not isinstance(query, str) or not query.strip():
        print("[AI Search API] Invalid query provided")
        return _json_response({'success': False, 'error': 'Search query is required'}, 400)

    if not isinstance(items, list) or not items:
        print("[AI Search API] Invalid items array provided")
        return _json_response({'success': False, 'error': 'Items array is required'}, 400)

    print(f"[AI Search API] Received request with query: \"{query}\", {len(items)} items")

    try:
        matching_ids = ai_search_items(query.strip(), items)
    except Exception as e:
        print(f"[AI Search API] Error: {e}\n{traceback.format_exc()}")
        return _json_response({
            'success': False,
            'error': f'Failed to perform AI search: {e}'
        }, 500)

    return _json_response({'success': True, 'matchingIds': matching_ids})


def handle_health(request):
    return _json_response({'status': 'ok', 'message': 'Server is running'})


ROUTES = {
    '/api/extract-link': ('POST', handle_extract_link),
    '/api/ai-search': ('POST', handle_ai_search),
    '/health': ('GET', handle_health),
}


@functions_framework.http
def api(request):
    """Main Cloud Function entry point. Routes on request path."""
    # Handle CORS preflight
    if request.method == 'OPTIONS':
        return ('', 204, CORS_HEADERS)

    path = (request.path or '/').rstrip('/') or '/'
    route = ROUTES.get(path)
    if route is None:
        return _json_response({'success': False, 'error': f'Not found: {path}'}, 404)

    method, handler = route
    if request.method != method:
        return _json_response({'success': False, 'error': f'Method {request.method} not allowed'}, 405)

    return handler(request)
