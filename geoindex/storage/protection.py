"""
Protected attribute checks for point updates.

The geohash and point payload attributes are derived from the point on
write. An update that touches either of them would leave the item under
a partition key and curve position that no longer match its stored
location, so such updates are rejected before the store is called.

Both update styles are inspected: the legacy ``AttributeUpdates`` mapping
and ``UpdateExpression`` strings, including attribute names referenced
through ``ExpressionAttributeNames`` placeholders. Names are compared
case-insensitively.
"""

import re
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from geoindex.exceptions import ProtectedAttributeError

# Attribute paths in an update expression: plain names and #placeholders.
# Value placeholders (:name) and nested map members (a.b) are skipped.
_NAME_TOKEN = re.compile(r"(?<![:\w#.])#?[A-Za-z_][A-Za-z0-9_]*")

_EXPRESSION_KEYWORDS = {
    "set",
    "remove",
    "add",
    "delete",
    "if_not_exists",
    "list_append",
}


def _expression_names(expression: str) -> Iterator[str]:
    """Yield attribute name tokens of an update expression."""
    for match in _NAME_TOKEN.finditer(expression):
        token = match.group(0)
        if token.lower() in _EXPRESSION_KEYWORDS:
            continue
        yield token


def find_protected_reference(
    update: Dict[str, Any],
    protected: Iterable[str],
) -> Optional[Tuple[str, Optional[str]]]:
    """
    Find the first reference to a protected attribute in update parameters.

    Args:
        update: Update parameters (AttributeUpdates, UpdateExpression,
            ExpressionAttributeNames)
        protected: Configured names of protected attributes

    Returns:
        (protected attribute name, placeholder alias or None), or None
        if the update does not touch a protected attribute
    """
    by_lower = {name.lower(): name for name in protected}

    for name in update.get("AttributeUpdates") or {}:
        if name.lower() in by_lower:
            return by_lower[name.lower()], None

    expression = update.get("UpdateExpression")
    if not expression:
        return None

    aliases = update.get("ExpressionAttributeNames") or {}
    for token in _expression_names(expression):
        if token.startswith("#"):
            resolved = aliases.get(token)
            if resolved is not None and resolved.lower() in by_lower:
                return by_lower[resolved.lower()], token
        elif token.lower() in by_lower:
            return by_lower[token.lower()], None

    return None


def check_update(update: Dict[str, Any], protected: Iterable[str]) -> None:
    """
    Reject update parameters that modify a protected attribute.

    Args:
        update: Update parameters
        protected: Configured names of protected attributes

    Raises:
        ProtectedAttributeError: Naming the attribute and the alias used
    """
    reference = find_protected_reference(update, protected)
    if reference is not None:
        attribute_name, alias = reference
        raise ProtectedAttributeError(attribute_name, alias)
