"""Utility functions for lessico application."""

import json
import logging
import re

from pydantic import ValidationError

from .errors import CorruptRecord

logger = logging.getLogger(__name__)


def extract_json(text: str):
    """Parse the first JSON array or object found in an LLM response.

    Models often wrap JSON in markdown fences or a sentence of prose, so the
    outermost [...] or {...} span is extracted before parsing.
    Raises ValueError when nothing parseable is found.
    """
    if not text or not text.strip():
        raise ValueError("Empty response")
    cleaned = text.strip().replace('```json', '').replace('```', '')
    match = re.search(r'\[[\s\S]*\]|\{[\s\S]*\}', cleaned)
    candidate = match.group(0) if match else cleaned
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in response: {e}") from e


def load_record(store, key: str, model):
    """Read and validate a single record. Returns None if the key is absent.

    Raises CorruptRecord if the stored payload does not match the schema.
    """
    data = store.get(key)
    if data is None:
        return None
    try:
        return model.from_dict(data)
    except (ValidationError, TypeError) as e:
        raise CorruptRecord(key, str(e)) from e


def _split_items(data: list, model) -> tuple[list, list]:
    records, invalid = [], []
    for item in data:
        try:
            records.append(model.from_dict(item))
        except (ValidationError, TypeError):
            invalid.append(item)
    return records, invalid


def load_records(store, key: str, model) -> list:
    """Read a stored list of records, skipping entries that fail validation."""
    data = store.get(key)
    if data is None:
        return []
    if not isinstance(data, list):
        logger.warning(f"Expected a list under '{key}', got {type(data).__name__}; ignoring it")
        return []
    records, invalid = _split_items(data, model)
    if invalid:
        logger.warning(f"Skipping {len(invalid)} invalid {model.__name__} item(s) under '{key}'")
    return records


def save_records(store, key: str, records: list, model) -> None:
    """Write records back, carrying over stored items that fail validation untouched.

    Raises CorruptRecord instead of overwriting a payload that is not a list.
    """
    data = store.get(key)
    if data is not None and not isinstance(data, list):
        raise CorruptRecord(key, f"expected a list, got {type(data).__name__}")
    _, invalid = _split_items(data or [], model)
    store.set(key, [r.to_dict() for r in records] + invalid)
