"""
AI search utilities for Synapcity.

Candidate items are split into small batches, each batch is described to
Gemini in one prompt, and the reply is parsed into a list of item IDs.
Replies are untrusted: only IDs submitted in the same batch are kept.
"""

import json
import re
from typing import Dict, Iterator, List

# Items per Gemini call
SEARCH_BATCH_SIZE = 3

JSON_ARRAY_PATTERN = re.compile(r'\[.*?\]', re.DOTALL)


def has_notes(item: Dict) -> bool:
    notes = item.get('notes')
    return isinstance(notes, str) and bool(notes.strip())


def filter_items_with_notes(items: List[Dict]) -> List[Dict]:
    """
    Keep only items that can be matched: an id plus non-empty notes.

    IDs are normalized to strings so they compare against the model's reply.
    """
    eligible = []
    for item in items or []:
        if not isinstance(item, dict) or item.get('id') is None:
            continue
        if not has_notes(item):
            continue
        eligible.append({
            'id': str(item['id']),
            'title': item.get('title') or 'Untitled',
            'notes': item['notes'],
        })
    return eligible


def chunk_items(items: List[Dict], size: int = SEARCH_BATCH_SIZE) -> Iterator[List[Dict]]:
    """Yield consecutive batches of at most `size` items."""
    for start in range(0, len(items), size):
        yield items[start:start + size]


def build_search_prompt(query: str, batch: List[Dict]) -> str:
    """Build the Gemini prompt for one batch of candidate items."""
    item_blocks = []
    for idx, item in enumerate(batch, start=1):
        item_blocks.append(
            f"Item {idx}:\n"
            f"- ID: {item['id']}\n"
            f"- Title: {item.get('title') or 'Untitled'}\n"
            f"- Notes: {item.get('notes') or 'No notes available'}\n"
        )
    items_text = '\n'.join(item_blocks)

    return f"""You are analyzing items to find which ones relate to the user's search query.

Search Query: "{query}"

Items to analyze:
{items_text}
For each item, determine if the notes content relates to or answers the search query. Consider:
- Direct matches in the notes
- Semantic similarity
- Conceptual relationships
- Whether the notes provide information relevant to the query

Respond with ONLY a JSON array of item IDs that match the query. If no items match, return an empty array [].

Example response format: ["id1", "id2"] or []

Do not include any explanation, only the JSON array."""


def find_ids_in_text(response_text: str, batch: List[Dict]) -> List[str]:
    """Fallback: treat any batch ID that appears literally in the text as a match."""
    lowered = response_text.lower()
    return [item['id'] for item in batch if item['id'].lower() in lowered]


def parse_matching_ids(response_text: str, batch: List[Dict]) -> Dict:
    """
    Parse a Gemini reply into the IDs it matched within this batch.

    Args:
        response_text: Raw reply text
        batch: The items that were sent in the prompt

    Returns:
        Dict with:
            ids: list - matched IDs present in the batch, in reply order
            parsed: bool - True if a JSON array was found and decoded
            discarded: list - returned IDs that were not in the batch
    """
    text = response_text or ''
    batch_ids = {item['id'] for item in batch}

    match = JSON_ARRAY_PATTERN.search(text)
    if not match:
        return {'ids': [], 'parsed': False, 'discarded': []}

    try:
        candidates = json.loads(match.group())
        parsed = isinstance(candidates, list)
    except ValueError:
        parsed = False
    if not parsed:
        # Malformed array: fall back to looking for the IDs in the raw text
        candidates = find_ids_in_text(text, batch)

    ids = []
    discarded = []
    for candidate in candidates:
        # Numeric IDs are accepted when the caller sent them as numbers
        if isinstance(candidate, bool) or not isinstance(candidate, (str, int)):
            discarded.append(candidate)
        elif str(candidate) in batch_ids:
            ids.append(str(candidate))
        else:
            discarded.append(candidate)

    return {'ids': ids, 'parsed': parsed, 'discarded': discarded}
