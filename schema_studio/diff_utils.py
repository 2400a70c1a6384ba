"""
Diff utilities for schema documents.

Compares the document being edited against the last loaded or saved version
using DeepDiff and turns the result into readable change lines for the editor.
"""

from typing import Dict, Any, List
import re
import logging

from deepdiff import DeepDiff

logger = logging.getLogger(__name__)

CHANGE_TYPES = (
    'values_changed',
    'type_changes',
    'dictionary_item_added',
    'dictionary_item_removed',
    'iterable_item_added',
    'iterable_item_removed',
)

_PATH_TOKEN_PATTERN = re.compile(r"\['([^']*)'\]|\[(\d+)\]")

# Schema keywords hidden from display paths so "root['properties']['age']['type']"
# reads as "age → type"
_STRUCTURAL_KEYS = {'properties'}


def calculate_document_diff(original: Dict[str, Any], modified: Dict[str, Any]) -> Dict[str, Any]:
    """
    Calculate differences between two schema documents.

    List order is significant (enum values and required names keep their order),
    dictionary key order is not.

    Args:
        original: Baseline document
        modified: Current document

    Returns:
        Dict keyed by DeepDiff change type; each value maps a DeepDiff path to
        ``{'old_value': ..., 'new_value': ...}``
    """
    diff = DeepDiff(original or {}, modified or {}, ignore_order=False, verbose_level=2)

    processed: Dict[str, Any] = {}
    for change_type in CHANGE_TYPES:
        section = diff.get(change_type)
        if not section:
            continue
        entries: Dict[str, Any] = {}
        for path, detail in section.items():
            if change_type in ('values_changed', 'type_changes'):
                entries[path] = {
                    'old_value': detail.get('old_value'),
                    'new_value': detail.get('new_value')
                }
            elif change_type.endswith('_added'):
                entries[path] = {'old_value': None, 'new_value': detail}
            else:
                entries[path] = {'old_value': detail, 'new_value': None}
        processed[change_type] = entries

    return processed


def has_changes(diff: Dict[str, Any]) -> bool:
    """
    Check if there are any changes in the diff.

    Args:
        diff: Diff dictionary from calculate_document_diff

    Returns:
        True if there are changes, False otherwise
    """
    if not diff:
        return False
    return any(diff.get(change_type) for change_type in CHANGE_TYPES)


def get_change_summary(diff: Dict[str, Any]) -> Dict[str, int]:
    """
    Get a summary of changes by type.

    Args:
        diff: Diff dictionary from calculate_document_diff

    Returns:
        Dictionary with change counts by type
    """
    summary = {
        'modified': len(diff.get('values_changed', {})),
        'type_changed': len(diff.get('type_changes', {})),
        'added': len(diff.get('dictionary_item_added', {})) + len(diff.get('iterable_item_added', {})),
        'removed': len(diff.get('dictionary_item_removed', {})) + len(diff.get('iterable_item_removed', {})),
    }
    summary['total'] = sum(summary.values())
    return summary


def clean_path(path: str) -> str:
    """
    Clean up a DeepDiff path for display.

    Args:
        path: Raw path such as ``root['properties']['address']['properties']['zip']``

    Returns:
        Display path such as ``address → zip``
    """
    display_parts: List[str] = []
    for key, index in _PATH_TOKEN_PATTERN.findall(str(path)):
        if index:
            if display_parts:
                display_parts[-1] += f"[{index}]"
            else:
                display_parts.append(f"[{index}]")
        elif key not in _STRUCTURAL_KEYS:
            display_parts.append(key)
    return " → ".join(display_parts) if display_parts else "root"


def format_changes(diff: Dict[str, Any]) -> List[str]:
    """
    Format diff output as display lines.

    Args:
        diff: Diff dictionary from calculate_document_diff

    Returns:
        One line per change, in a stable order
    """
    labels = {
        'values_changed': 'Modified',
        'type_changes': 'Type changed',
        'dictionary_item_added': 'Added',
        'dictionary_item_removed': 'Removed',
        'iterable_item_added': 'Added',
        'iterable_item_removed': 'Removed',
    }
    lines: List[str] = []
    for change_type in CHANGE_TYPES:
        for path, detail in sorted(diff.get(change_type, {}).items()):
            label = labels[change_type]
            if label in ('Modified', 'Type changed'):
                lines.append(f"{label}: {clean_path(path)} ({detail['old_value']!r} → {detail['new_value']!r})")
            else:
                lines.append(f"{label}: {clean_path(path)}")
    return lines
