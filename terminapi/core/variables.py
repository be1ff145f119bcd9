"""
Placeholder resolution for request templates.

A placeholder is ``{{name}}``; whitespace around the name is ignored. Unknown
names are left in place so a half-configured environment is visible in the
outgoing request instead of silently becoming an empty string.
"""

import json
import re
from typing import Any, Dict, List, Mapping, Optional

PLACEHOLDER_PATTERN = re.compile(r"\{\{(.+?)\}\}", re.DOTALL)


def resolve(text: Optional[str], variables: Mapping[str, str]) -> str:
    """
    Substitute every ``{{name}}`` whose name is in ``variables``.

    Substituted values are not scanned again.

    Args:
        text: Template text
        variables: Flat name to value mapping

    Returns:
        str: Resolved text
    """
    if not text:
        return ""

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1).strip()
        if name in variables:
            return str(variables[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_replace, text)


def resolve_and_parse_json(text: Optional[str], variables: Mapping[str, str]) -> Any:
    """
    Resolve placeholders, then try to parse the result as JSON.

    Returns:
        The parsed value, or the resolved string when it is not valid JSON
    """
    resolved = resolve(text, variables)
    try:
        return json.loads(resolved)
    except ValueError:
        return resolved


def find_placeholders(text: Optional[str]) -> List[str]:
    """Names of all placeholders in ``text``, in order of appearance."""
    if not text:
        return []
    return [match.strip() for match in PLACEHOLDER_PATTERN.findall(text)]


def merge_variables(*mappings: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Merge variable mappings left to right; later mappings win."""
    merged: Dict[str, str] = {}
    for mapping in mappings:
        if mapping:
            merged.update(mapping)
    return merged
