"""
Screening of raw risk factor inputs before they reach the scorer.

Entries that cannot be scored safely are dropped with a warning; the
rest pass through unchanged. Nothing here raises.
"""

import math
import re
from dataclasses import dataclass, field

from pricing_skills.risk_factor_scorer import RiskFactorInput

# Script-like content rejected in string values and notes
SUSPICIOUS_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"<\s*script\b",
        r"javascript:",
        r"vbscript:",
        r"\bon\w+\s*=",
        r"eval\s*\(",
        r"\bdocument\.\w",
        r"\bwindow\.\w",
        r"(?:local|session)Storage\.",
        r"fetch\s*\(",
        r"XMLHttpRequest",
        r"<\s*(?:iframe|object|embed|form|input|textarea|select|button|link|meta|style)\b",
        r"&#x?[0-9a-f]+",
    )
)


@dataclass
class ScreenedInputs:
    accepted: dict[str, RiskFactorInput] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


def is_suspicious(text: str) -> bool:
    return any(pattern.search(text) for pattern in SUSPICIOUS_PATTERNS)


def _value_problem(name: str, value, max_length: int) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return f"Risk factor '{name}' has an invalid numeric value ({value}); input dropped"
        return None
    if len(value) > max_length:
        return f"Risk factor '{name}' has an excessively long string value ({len(value)} characters); input dropped"
    if is_suspicious(value):
        return f"Risk factor '{name}' contains potentially malicious content; input dropped"
    return None


def screen_risk_inputs(
    inputs: dict[str, RiskFactorInput],
    max_string_length: int,
    unusual_threshold: float,
) -> ScreenedInputs:
    """
    Drop unusable risk factor inputs and flag suspicious ones.

    Args:
        inputs: Raw factor name -> input mapping from the request.
        max_string_length: Longest accepted string value or note.
        unusual_threshold: Numbers above this are kept but flagged.
    """
    screened = ScreenedInputs()
    seen: set[str] = set()
    duplicates: list[str] = []

    for name, entry in inputs.items():
        key = name.strip()
        if not key or len(key) > max_string_length or is_suspicious(key):
            screened.warnings.append(f"Invalid risk factor name: '{name[:50]}'; input dropped")
            continue

        problem = _value_problem(key, entry.value, max_string_length)
        if problem:
            screened.warnings.append(problem)
            continue

        if entry.notes and is_suspicious(entry.notes):
            screened.warnings.append(f"Risk factor '{key}' notes contain potentially malicious content; notes removed")
            entry = RiskFactorInput(value=entry.value)
        elif entry.notes and len(entry.notes) > max_string_length:
            screened.warnings.append(f"Risk factor '{key}' notes are an excessively long string value; notes truncated")
            entry = RiskFactorInput(value=entry.value, notes=entry.notes[:max_string_length])

        value = entry.value
        if not isinstance(value, bool) and isinstance(value, (int, float)) and value > unusual_threshold:
            screened.warnings.append(f"Risk factor '{key}' has an unusually high value ({value:g})")

        folded = key.lower()
        if folded in seen:
            duplicates.append(key)
            continue
        seen.add(folded)
        screened.accepted[key] = entry

    if duplicates:
        screened.warnings.append(f"Duplicate risk factor names detected: {', '.join(duplicates)}")
    return screened
