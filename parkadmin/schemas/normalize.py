"""
Normalization of loosely-shaped fields at the API boundary.

Over several frontend revisions ``sdg`` and ``images`` have been sent as:

- nothing (None / "")
- a single string                      "Goal 4"
- a JSON or Python-style list string   '["Goal 4", "Goal 9"]', "['Goal 4']"
- a comma separated string             "Goal 4, Goal 9"
- a list of strings                    ["Goal 4", "Goal 9"]
- a list of objects                    [{"_id": "...", "name": "Goal 4"}]
                                       [{"url": "https://..."}]

These helpers turn any of those into ``list[str]`` once, in the request
schemas, so the rest of the code only ever sees a list of strings.
"""

import json
from typing import Any, Iterable, List

# Keys checked, in order, when a tag arrives as an object
TAG_KEYS = ("name", "label", "value", "title", "_id", "id")

# Keys checked, in order, when an image arrives as an object
IMAGE_KEYS = ("secure_url", "url", "src", "preview")


def _split_string(value: str) -> List[Any]:
    text = value.strip()
    if not text:
        return []

    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text.replace("'", '"'))
        except ValueError:
            return [part for part in text[1:-1].split(",")]
        if isinstance(parsed, list):
            return parsed
        return [parsed]

    return [text]


def _from_mapping(item: dict, keys: Iterable[str]) -> Any:
    for key in keys:
        if item.get(key):
            return item[key]
    return None


def _clean(items: Iterable[Any], keys: Iterable[str]) -> List[str]:
    keys = tuple(keys)
    result: List[str] = []
    seen = set()
    for item in items:
        if isinstance(item, dict):
            item = _from_mapping(item, keys)
        if item is None:
            continue
        text = str(item).strip().strip("'\"").strip()
        if text and text not in seen:
            seen.add(text)
            result.append(text)
    return result


def normalize_sdg(value: Any) -> List[str]:
    """
    Normalize SDG tags to a de-duplicated list of non-empty strings.

    Plain strings that are not list literals are additionally split on commas,
    since older forms joined the selected tags with ", ".

    Examples:
        >>> normalize_sdg("Goal 4, Goal 9")
        ['Goal 4', 'Goal 9']
        >>> normalize_sdg([{"name": "Goal 4"}, "Goal 4"])
        ['Goal 4']
    """
    if value is None:
        return []

    if isinstance(value, str):
        items: List[Any] = []
        for part in _split_string(value):
            if isinstance(part, str):
                items.extend(part.split(","))
            else:
                items.append(part)
        return _clean(items, TAG_KEYS)

    if isinstance(value, dict):
        return _clean([value], TAG_KEYS)

    if isinstance(value, (list, tuple)):
        return _clean(value, TAG_KEYS)

    return _clean([value], TAG_KEYS)


def normalize_images(value: Any) -> List[str]:
    """
    Normalize image references to a list of strings (URLs or data URIs).

    Data URIs contain commas, so unlike ``normalize_sdg`` a plain string is
    never split on commas.
    """
    if value is None:
        return []

    if isinstance(value, str):
        text = value.strip()
        if text.startswith("data:"):
            return [text]
        return _clean(_split_string(text), IMAGE_KEYS)

    if isinstance(value, dict):
        return _clean([value], IMAGE_KEYS)

    if isinstance(value, (list, tuple)):
        return _clean(value, IMAGE_KEYS)

    return []


def normalize_image(value: Any) -> Any:
    """
    Normalize a single-image field (press releases).

    Returns the first reference, ``None`` when explicitly cleared
    (None or ""), and leaves anything else to field validation.
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    images = normalize_images(value)
    return images[0] if images else None
