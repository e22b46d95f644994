"""Japanese deinflection.

Maps a conjugated surface form back to candidate dictionary forms by
repeatedly stripping known suffixes, e.g. 食べられなかった:

    食べられなかった -(past)-> 食べられない -(negative)-> 食べられる
    -(potential or passive)-> 食べる

The rule table (``data/deinflect.json``) uses the Yomichan layout::

    {"<reason>": [{"kanaIn": "かった", "kanaOut": "い",
                   "rulesIn": [], "rulesOut": ["adj-i"]}, ...]}

``rulesIn`` is the word class the current form must have for the rule to
apply (empty means the rule only applies to the raw surface form),
``rulesOut`` the word class of the produced form.

Candidates are plain strings; nothing here consults a dictionary. The
orchestrator joins them against the store.
"""

import json
import logging
from collections import deque
from dataclasses import dataclass
from enum import IntFlag
from functools import reduce
from pathlib import Path
from typing import Iterable, Self


logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "data" / "deinflect.json"
DEFAULT_MAX_DEPTH = 8

# Shown between reasons in transformation notes, innermost first
REASON_SEPARATOR = " « "


class RuleType(IntFlag):
    """Word classes a deinflected form can belong to."""

    NONE = 0
    V1 = 0b00000001      # ichidan verb
    V5 = 0b00000010      # godan verb
    VS = 0b00000100      # suru verb
    VK = 0b00001000      # kuru verb
    VZ = 0b00010000      # zuru verb
    ADJ_I = 0b00100000   # i-adjective
    IRU = 0b01000000     # intermediate -iru ending (ている)


_RULE_NAMES = {
    "v1": RuleType.V1,
    "v5": RuleType.V5,
    "vs": RuleType.VS,
    "vk": RuleType.VK,
    "vz": RuleType.VZ,
    "adj-i": RuleType.ADJ_I,
    "iru": RuleType.IRU,
}


def rules_to_flags(names: Iterable[str]) -> RuleType:
    """Fold rule names into a flag set. Unknown names are ignored."""
    return reduce(lambda acc, name: acc | _RULE_NAMES.get(name, RuleType.NONE), names, RuleType.NONE)


@dataclass(frozen=True, slots=True)
class DeinflectionRule:
    """One suffix rewrite."""

    reason: str
    kana_in: str
    kana_out: str
    rules_in: RuleType
    rules_out: RuleType


@dataclass(frozen=True, slots=True)
class Deinflection:
    """A candidate dictionary form.

    ``reasons`` lists the transformations from the candidate outward, so
    食べる <- 食べられなかった reads ("potential or passive", "negative", "past").
    """

    term: str
    reasons: tuple[str, ...]
    score: float
    rules: RuleType = RuleType.NONE

    @property
    def depth(self) -> int:
        return len(self.reasons)

    @property
    def is_identity(self) -> bool:
        return not self.reasons

    @property
    def notes(self) -> str | None:
        return REASON_SEPARATOR.join(self.reasons) if self.reasons else None


def _score_for_depth(depth: int) -> float:
    return 1.0 / (depth + 1)


class Deinflector:
    """Breadth-first suffix rewriter over a fixed rule table."""

    def __init__(self, rules: list[DeinflectionRule], max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self._rules = tuple(rules)
        self.max_depth = max_depth

    @classmethod
    def from_reasons(cls, reasons: dict[str, list[dict]], max_depth: int = DEFAULT_MAX_DEPTH) -> Self:
        """Build from the Yomichan ``{reason: [variant, ...]}`` mapping."""
        rules = [
            DeinflectionRule(
                reason=reason,
                kana_in=variant["kanaIn"],
                kana_out=variant["kanaOut"],
                rules_in=rules_to_flags(variant.get("rulesIn", [])),
                rules_out=rules_to_flags(variant.get("rulesOut", [])),
            )
            for reason, variants in reasons.items()
            for variant in variants
        ]
        return cls(rules, max_depth=max_depth)

    @classmethod
    def from_json(cls, path: Path | str = DEFAULT_RULES_PATH, max_depth: int = DEFAULT_MAX_DEPTH) -> Self:
        with open(path, encoding="utf-8") as f:
            reasons = json.load(f)
        deinflector = cls.from_reasons(reasons, max_depth=max_depth)
        logger.info(f"Loaded {len(deinflector._rules)} deinflection rules ({len(reasons)} reasons) from {path}")
        return deinflector

    @property
    def rules(self) -> tuple[DeinflectionRule, ...]:
        return self._rules

    def deinflect(self, source: str) -> list[Deinflection]:
        """
        Enumerate candidate dictionary forms of ``source``.

        The first result is always the identity candidate ``(source, (), 1.0)``.
        Results are in breadth-first order, so shorter chains come first.
        A (term, word class) pair is only expanded once, and no chain grows
        beyond ``max_depth`` rewrites.
        """
        identity = Deinflection(term=source, reasons=(), score=1.0)
        results = [identity]
        seen = {(source, RuleType.NONE)}
        queue = deque([identity])

        while queue:
            current = queue.popleft()
            if current.depth >= self.max_depth:
                continue

            for rule in self._rules:
                if current.rules and not (current.rules & rule.rules_in):
                    continue
                if not current.term.endswith(rule.kana_in):
                    continue
                stem_len = len(current.term) - len(rule.kana_in)
                if stem_len + len(rule.kana_out) <= 0:
                    continue

                term = current.term[:stem_len] + rule.kana_out
                key = (term, rule.rules_out)
                if key in seen:
                    continue
                seen.add(key)

                depth = current.depth + 1
                candidate = Deinflection(
                    term=term,
                    reasons=(rule.reason,) + current.reasons,
                    score=_score_for_depth(depth),
                    rules=rule.rules_out,
                )
                results.append(candidate)
                queue.append(candidate)

        return results
