"""Query-string codec following the bracket conventions of the REST backend.

Nested values are flattened as ``hotels[0][hotel_id]=1`` on the way out and
rebuilt into dicts and lists on the way in.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, quote

_SEGMENT = re.compile(r"\[([^\[\]]*)\]")
ARRAY_LIMIT = 20


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten(value: Any, prefix: str = "") -> Iterator[Tuple[str, str]]:
    """Yield ``(key, value)`` pairs for a nested mapping/sequence."""
    if isinstance(value, Mapping):
        for key, item in value.items():
            yield from flatten(item, f"{prefix}[{key}]" if prefix else str(key))
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            yield from flatten(item, f"{prefix}[{index}]")
    elif value is not None:
        yield prefix, _scalar(value)


def encode(data: Optional[Mapping[str, Any]]) -> str:
    """Encode ``data`` without a leading ``?``."""
    if not data:
        return ""
    return "&".join(
        f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in flatten(data)
    )


def query_to_search(query: Optional[Mapping[str, Any]] = None) -> str:
    encoded = encode(query)
    return f"?{encoded}" if encoded else ""


def _listify(node: Any) -> Any:
    if not isinstance(node, dict):
        return node
    converted = {key: _listify(value) for key, value in node.items()}
    if converted and all(key.isdecimal() for key in converted):
        keys = sorted(converted, key=int)
        if int(keys[-1]) <= ARRAY_LIMIT:
            return [converted[key] for key in keys]
    return converted


def search_to_query(search: Optional[str] = "?") -> Dict[str, Any]:
    """Parse a query string (``?`` optional) into nested dicts and lists."""
    if not search:
        return {}
    root: Dict[str, Any] = {}
    for raw_key, value in parse_qsl(search.lstrip("?"), keep_blank_values=True):
        head, _, rest = raw_key.partition("[")
        path: List[str] = [head]
        if rest:
            path.extend(_SEGMENT.findall("[" + rest))
        node = root
        for segment in path[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        leaf = path[-1]
        if leaf == "":
            leaf = str(len(node))
        node[leaf] = value
    return {key: _listify(value) for key, value in root.items()}
