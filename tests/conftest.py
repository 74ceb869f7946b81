"""
Shared pytest fixtures for Synapcity link enricher tests.
"""

import pytest
import sys
import importlib.util
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load Cloud Function module with a unique name at module load time
_link_enricher_module = _load_module_from_path(
    'link_enricher_main',
    PROJECT_ROOT / 'link-enricher' / 'main.py'
)


# ============================================================================
# Link Enricher Function Fixtures
# ============================================================================

@pytest.fixture
def link_enricher():
    """Returns the loaded link-enricher module."""
    return _link_enricher_module


@pytest.fixture(autouse=True)
def reset_client_cache():
    """Make sure no test leaks a cached AI client into another."""
    _link_enricher_module._client_cache['gemini'] = None
    _link_enricher_module._client_cache['claude'] = None
    yield
    _link_enricher_module._client_cache['gemini'] = None
    _link_enricher_module._client_cache['claude'] = None


@pytest.fixture
def fetch_webpage():
    """Returns fetch_webpage function from link-enricher."""
    return _link_enricher_module.fetch_webpage


@pytest.fixture
def summarize_youtube_video():
    """Returns summarize_youtube_video function from link-enricher."""
    return _link_enricher_module.summarize_youtube_video


@pytest.fixture
def summarize_with_claude():
    """Returns summarize_with_claude function from link-enricher."""
    return _link_enricher_module.summarize_with_claude


@pytest.fixture
def ai_search_items():
    """Returns ai_search_items function from link-enricher."""
    return _link_enricher_module.ai_search_items


@pytest.fixture
def enrich_link():
    """Returns the enrichment orchestrator from link-enricher."""
    return _link_enricher_module.enrich_link


@pytest.fixture
def api():
    """Returns main entry point from link-enricher."""
    return _link_enricher_module.api


# ============================================================================
# AI backend fakes
# ============================================================================

@pytest.fixture
def gemini_model():
    """Factory for a fake Gemini model that replies with the given texts in order."""
    def _make(*texts, error=None):
        model = MagicMock()
        if error is not None:
            model.generate_content.side_effect = error
        else:
            model.generate_content.side_effect = [SimpleNamespace(text=text) for text in texts]
        return model

    return _make


@pytest.fixture
def claude_client():
    """Factory for a fake Anthropic client returning the given text blocks."""
    def _make(*texts, error=None):
        client = MagicMock()
        if error is not None:
            client.messages.create.side_effect = error
        else:
            client.messages.create.return_value = SimpleNamespace(
                content=[SimpleNamespace(type='text', text=text) for text in texts]
            )
        return client

    return _make


# ============================================================================
# Sample pages
# ============================================================================

LONG_PARAGRAPH = (
    "Python's asyncio library provides an event loop, coroutines and tasks. "
    "This article walks through structured concurrency with task groups, "
    "cancellation scopes and timeouts, and shows how to test async code."
)


@pytest.fixture
def long_paragraph():
    return LONG_PARAGRAPH


@pytest.fixture
def sample_article_html():
    """Returns HTML of a sample article page with plenty of body text."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <title>Async Python in Practice | Example Blog</title>
        <meta property="og:title" content="Async Python in Practice">
        <meta property="og:description" content="A practical tour of asyncio">
        <meta name="description" content="Learn asyncio">
        <meta property="og:image" content="/images/cover.png">
        <script>var tracking = "should not appear";</script>
    </head>
    <body>
        <header><h1>Example Blog</h1></header>
        <nav><a href="/">Home</a> <a href="/about">About</a></nav>
        <article>
            <h2>Async Python in Practice</h2>
            <p>{LONG_PARAGRAPH}</p>
            <div class="ad">Buy our course now</div>
        </article>
        <aside class="sidebar">Related posts</aside>
        <footer>Copyright Example Blog</footer>
    </body>
    </html>
    """


@pytest.fixture
def short_page_html():
    """Returns HTML of a page with very little body text."""
    return """
    <html>
    <head>
        <title>Tiny Page</title>
        <meta name="description" content="A very small page">
    </head>
    <body><p>Hello there.</p></body>
    </html>
    """


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST', path='/'):
            self._json = json_data
            self.method = method
            self.path = path
            self.data = b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest
