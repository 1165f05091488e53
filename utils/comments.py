import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple


logger = logging.getLogger(__name__)

# fromisoformat before 3.11 takes only 3 or 6 fractional digits, Go sends 1 to 9
_FRACTION = re.compile(r"\.(\d+)")


def _six_digit_fraction(value: str) -> str:
    return _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], value, count=1)


def _as_dict(comment: Any) -> Dict[str, Any]:
    if hasattr(comment, "model_dump"):
        return comment.model_dump()
    return dict(comment)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 string or datetime -> aware datetime, None if it can't be read"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            # fromisoformat only understands "Z" from 3.11 on
            parsed = datetime.fromisoformat(_six_digit_fraction(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _created_key(node: Dict[str, Any]) -> Tuple[bool, float]:
    created_at = parse_timestamp(node.get("created_at"))
    if created_at is None:
        logger.warning(f"Comment {node.get('id')} has unreadable created_at: {node.get('created_at')!r}")
        return (False, 0.0)
    return (True, created_at.timestamp())


def _sort_children(node: Dict[str, Any]) -> None:
    # reverse=True keeps equal keys in insertion order, bad timestamps end up last
    node["children"].sort(key=_created_key, reverse=True)
    for child in node["children"]:
        _sort_children(child)


def build_comment_tree(
    comments: Iterable[Any],
    root_ids: Iterable[str] = ()
) -> List[Dict[str, Any]]:
    """
    Builds a forest out of a flat list of comment records.

    Every returned node is a copy of its record with a ``children`` list,
    replies sorted newest first. Records whose parent is not in the list are
    dropped. Ids listed in ``root_ids`` become roots even if they have a parent.
    A duplicated id keeps its last record, placed where that record says.
    """
    records = [_as_dict(comment) for comment in comments]
    forced_roots = set(root_ids)

    nodes: Dict[str, Dict[str, Any]] = {}
    last_seen: Dict[str, int] = {}
    for position, record in enumerate(records):
        if record.get("id") is None:
            continue
        nodes[record["id"]] = {**record, "children": []}
        last_seen[record["id"]] = position

    roots: List[Dict[str, Any]] = []
    for position, record in enumerate(records):
        comment_id = record.get("id")
        if comment_id is None or last_seen[comment_id] != position:
            continue

        parent_id = record.get("parent_id")
        if parent_id is None or comment_id in forced_roots:
            roots.append(nodes[comment_id])
        elif parent_id in nodes:
            nodes[parent_id]["children"].append(nodes[comment_id])
        else:
            logger.debug(f"Dropping comment {comment_id}: parent {parent_id} is not in the list")

    for root in roots:
        _sort_children(root)

    return roots


def build_comment_thread(comments: Iterable[Any], comment_id: str) -> Optional[Dict[str, Any]]:
    """Subtree rooted at ``comment_id``, None if the comment is not in the list"""
    for root in build_comment_tree(comments, root_ids=(comment_id,)):
        if root["id"] == comment_id:
            return root
    return None
