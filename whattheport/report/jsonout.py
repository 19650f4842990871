from __future__ import annotations

import json
from typing import Any, Dict, Union

from ..models import PortLookupResult, SearchResult

PROTOCOL_KEYS = ("tcp", "udp", "sctp", "dccp")
OPTIONAL_LIST_KEYS = ("links", "notes-and-refs")


def _prune_use_case(use_case: Dict[str, Any]) -> Dict[str, Any]:
    # unused protocols and empty sections are left out
    for key in PROTOCOL_KEYS:
        if use_case.get(key) is None:
            use_case.pop(key, None)
    for key in OPTIONAL_LIST_KEYS:
        if not use_case.get(key):
            use_case.pop(key, None)
    return use_case


def _prune_matched(matched: Dict[str, Any]) -> Dict[str, Any]:
    matched["use-cases"] = [_prune_use_case(u) for u in matched["use-cases"]]
    return matched


def to_json_data(result: Union[PortLookupResult, SearchResult]) -> Dict[str, Any]:
    """Tagged, kebab-case representation of a lookup or search result."""
    data = result.model_dump(mode="json", by_alias=True)
    if isinstance(result, PortLookupResult):
        if data["matched"] is not None:
            data["matched"] = _prune_matched(data["matched"])
        return {"type": "port-lookup", "result": data}
    if isinstance(result, SearchResult):
        data["matched"] = [_prune_matched(m) for m in data["matched"]]
        return {"type": "search", "result": data}
    raise TypeError("to_json_data expects a PortLookupResult or a SearchResult")


def render_json(result: Union[PortLookupResult, SearchResult]) -> str:
    return json.dumps(to_json_data(result), indent=2, default=str)
