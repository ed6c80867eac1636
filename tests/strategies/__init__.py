"""Hypothesis strategies for vcardengine property-based testing.

Usage:
    from tests.strategies import records, text_values

Event-Emitting Strategies (HypoFuzz-Optimized):
    These strategies emit hypothesis.event() calls for coverage-guided fuzzing:
    - text_values, unfolded_lines, structured_components, records
"""

from .vcard import (
    TYPE_VALUES,
    non_empty_values,
    records,
    structured_components,
    structured_names,
    text_values,
    type_parameters,
    unfolded_lines,
)

__all__ = [
    "TYPE_VALUES",
    "non_empty_values",
    "records",
    "structured_components",
    "structured_names",
    "text_values",
    "type_parameters",
    "unfolded_lines",
]
