"""
Label Filter Module

Operator-supplied labels are only exported when their key matches the
configured pattern, which keeps the number of metric series bounded.
"""

from typing import Dict, Optional, Pattern
import re

from ..errors import ConfigError

_INVALID_LABEL_CHARS = re.compile(r'[^a-zA-Z0-9_]')


def compile_label_filter(expr: str) -> Pattern:
    """Compile the label-allow expression."""
    try:
        return re.compile(expr)
    except re.error as e:
        raise ConfigError(f"Invalid labels filter {expr!r}: {e}") from e


def allowed_labels(labels: Optional[Dict[str, str]], pattern: Pattern) -> Dict[str, str]:
    """Return the labels whose key matches the pattern."""
    if not labels:
        return {}
    return {name: value for name, value in labels.items() if pattern.search(name)}


def sanitize_label_name(name: str) -> str:
    """Turn an arbitrary label key into a valid, prefixed Prometheus label name."""
    return "label_" + _INVALID_LABEL_CHARS.sub('_', name)
