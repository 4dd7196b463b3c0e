"""
Module: batch_helpers.py
Description: Utility functions for batch operations.

Provides helpers for splitting bulk pushes into transport-sized chunks,
building per-entry batch ids and layering request parameters.

Key Components:
- chunk_list(): Split lists into smaller chunks
- batch_entry_id(): Call-time timestamp plus intra-chunk index
- merge_params(): Last-wins merge of parameter layers

Dependencies: typing
"""

from typing import Any, Dict, List, Optional, Sequence, TypeVar

T = TypeVar('T')


def chunk_list(items: Sequence[T], chunk_size: int) -> List[List[T]]:
    """
    Split a sequence into consecutive chunks of at most chunk_size.

    Args:
        items: Sequence to split into chunks
        chunk_size: Maximum size of each chunk

    Returns:
        List of chunks, where each chunk is a list of items

    Raises:
        ValueError: If chunk_size is not positive

    Example:
        >>> chunk_list([1, 2, 3, 4, 5], 2)
        [[1, 2], [3, 4], [5]]
    """
    if not isinstance(items, (list, tuple)):
        raise ValueError("items must be a list or tuple")
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    return [list(items[i:i + chunk_size]) for i in range(0, len(items), chunk_size)]


def batch_entry_id(call_ms: int, index: int) -> str:
    """
    Build the id of one entry inside a batch send.

    Unique within a single batch call only; two calls in the same
    millisecond produce overlapping ids.

    Example:
        >>> batch_entry_id(1700000000000, 3)
        '17000000000003'
    """
    return f"{call_ms}{index}"


def merge_params(*layers: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge parameter layers left to right; later layers win.

    None layers and None values are skipped so that an unset keyword
    argument never hides a lower layer.

    Example:
        >>> merge_params({"wait": 20, "url": "a"}, None, {"wait": 5, "url": None})
        {'wait': 5, 'url': 'a'}
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is not None:
                merged[key] = value
    return merged
