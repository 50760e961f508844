"""PII detectors and the configuration-driven detector registry.

Each detector is an immutable (name, pattern) pair. Patterns are compiled once
with google-re2, which guarantees linear-time matching, so adversarial inputs
(long digit runs next to a near-miss phone or card number) cannot trigger
catastrophic backtracking.

RE2 digit and word-boundary classes are ASCII-only: ``\\d`` is ``[0-9]`` and
``\\b`` is an ASCII word boundary, so text with non-Latin digits or letters
never counts. Phone separators are the exception: ``PHONE_SEPARATOR`` spells
out the full ECMAScript whitespace set (vertical tab, NBSP, the U+2000 block,
ideographic space and friends), which RE2's ASCII ``\\s`` would miss.

Example:
  from pii_blocker.guardrails.detectors import build_registry
  from pii_blocker.guardrails.evaluator import EvaluatorConfig

  registry = build_registry(EvaluatorConfig(categories=["email", "ssn"]))
  [d.name for d in registry]
  # -> ["ssn", "email"]
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Tuple

import re2

if TYPE_CHECKING:
    from pii_blocker.guardrails.evaluator import EvaluatorConfig


@dataclass(frozen=True)
class Detector:
    """A named pattern that counts one PII category in text.

    Attributes:
      name: Category name; results report it as ``"<name>_count"``.
      pattern: Pre-compiled re2 pattern.
    """

    name: str
    pattern: Any  # re2._Regexp

    @property
    def source(self) -> str:
        """The pattern's source string."""
        return self.pattern.pattern

    def count(self, text: str) -> int:
        """Return the number of non-overlapping, leftmost-first matches."""
        return sum(1 for _ in self.pattern.finditer(text))


def compile_detector(name: str, pattern: str) -> Detector:
    """Compile a pattern string into a `Detector`.

    Raises:
      ValueError: If `name` is not a non-empty identifier, or the pattern is
        rejected by re2 (e.g. backreferences or lookaround).
    """
    if not name or not name.isidentifier():
        raise ValueError(f"Invalid detector name: {name!r}")
    try:
        compiled = re2.compile(pattern)
    except re2.error as exc:
        raise ValueError(f"Invalid pattern for detector {name!r}: {exc}") from exc
    return Detector(name=name, pattern=compiled)


# ECMAScript whitespace plus the "-" and "." phone separators.
PHONE_SEPARATOR = (
    r"[-.\s\x{0B}\x{A0}\x{1680}\x{2000}-\x{200A}"
    r"\x{2028}\x{2029}\x{202F}\x{205F}\x{3000}\x{FEFF}]"
)

# Results carry the total under this key; no category may claim it.
RESERVED_NAMES = frozenset({"total_pii"})

# Default categories, in result order. Compiled at import, never per call.
DEFAULT_DETECTORS: Tuple[Detector, ...] = (
    compile_detector("ssn", r"\b\d{3}-\d{2}-\d{4}\b"),
    compile_detector("email", r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),
    compile_detector(
        "phone", rf"\b\(?\d{{3}}\)?{PHONE_SEPARATOR}?\d{{3}}{PHONE_SEPARATOR}?\d{{4}}\b"
    ),
    compile_detector("credit_card", r"\b(?:\d{4}[- ]?){3}\d{4}\b"),
    compile_detector(
        "dob", r"\b(?:0[1-9]|1[0-2])/(?:0[1-9]|[12]\d|3[01])/(?:19|20)\d{2}\b"
    ),
    compile_detector("ip_address", r"\b(?:\d{1,3}\.){3}\d{1,3}\b"),
)

DEFAULT_CATEGORIES: Tuple[str, ...] = tuple(d.name for d in DEFAULT_DETECTORS)


def build_registry(config: "EvaluatorConfig | None" = None) -> Tuple[Detector, ...]:
    """Build the detector tuple for a configuration.

    Default detectors are filtered by `config.categories` (keeping default
    order), then `config.extra_detectors` are appended in mapping order.

    Args:
      config: Optional evaluator configuration. `None` yields the defaults.

    Returns:
      An immutable tuple of detectors, fixed for the lifetime of the caller.

    Raises:
      ValueError: On unknown categories, duplicate or reserved names, or
        invalid patterns.
    """
    if config is None:
        return DEFAULT_DETECTORS

    if config.categories is None:
        detectors = list(DEFAULT_DETECTORS)
    else:
        wanted = set(config.categories)
        unknown = sorted(wanted - set(DEFAULT_CATEGORIES))
        if unknown:
            raise ValueError(f"Unknown PII categories: {', '.join(unknown)}")
        detectors = [d for d in DEFAULT_DETECTORS if d.name in wanted]

    taken = set(DEFAULT_CATEGORIES)
    for name, pattern in config.extra_detectors.items():
        if name in RESERVED_NAMES:
            raise ValueError(f"Detector name is reserved: {name!r}")
        if name in taken:
            raise ValueError(f"Detector name already in use: {name!r}")
        detectors.append(compile_detector(name, pattern))
        taken.add(name)

    return tuple(detectors)
