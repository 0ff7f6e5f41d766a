"""Auto-suggest bindings by signal type and name similarity.

For each application signal without a mapping, picks the best unmapped
channel or register of the same signal type, scoring names, descriptions
and tags against the signal name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from hal_mapper.domain.model.catalog import MappingSource

if TYPE_CHECKING:
    from hal_mapper.application.mapping_manager import MappingManager
    from hal_mapper.domain.model.hardware import ApplicationSignal
    from hal_mapper.domain.model.mapping import Configuration, Mapping

logger = structlog.get_logger(__name__)

MIN_SCORE = 0.2

_SEPARATORS = re.compile(r"[_\-.\s]")
_WORD_SPLIT = re.compile(r"[_\-.\s]+")


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A proposed binding with its similarity score (0..1)."""

    source: MappingSource
    source_id: str
    source_name: str
    app_signal_id: str
    app_name: str
    score: float
    reason: str


def _squash(text: str) -> str:
    return _SEPARATORS.sub("", text.lower())


def name_score(a: str, b: str) -> float:
    """Similarity of two identifiers.

    1.0 when equal ignoring case and separators, 0.8 when one contains the
    other, otherwise 0.3-0.7 by the share of overlapping words. Empty
    names never match.
    """
    al, bl = _squash(a), _squash(b)
    if not al or not bl:
        return 0.0
    if al == bl:
        return 1.0
    if al in bl or bl in al:
        return 0.8

    a_words = [w for w in _WORD_SPLIT.split(a.lower()) if w]
    b_words = [w for w in _WORD_SPLIT.split(b.lower()) if w]
    common = sum(1 for w in a_words if any(w in bw or bw in w for bw in b_words))
    if common > 0:
        return 0.3 + 0.4 * (common / max(len(a_words), len(b_words)))
    return 0.0


def tag_score(tag: str, app_name: str) -> float:
    """Similarity of a plant tag to a signal name (0, 0.7 or 1.0)."""
    if not tag:
        return 0.0
    tl, al = _squash(tag), _squash(app_name)
    if tl == al:
        return 1.0
    if tl in al or al in tl:
        return 0.7
    return 0.0


def _score(names: tuple[str, str], tag: str, signal_name: str) -> tuple[float, str]:
    ns = max(name_score(names[0], signal_name), name_score(names[1], signal_name))
    ts = tag_score(tag, signal_name)
    return max(ns, ts), (f'tag "{tag}"' if ts > ns else "name match")


def compute_suggestions(
    config: Configuration, signals: list[ApplicationSignal]
) -> list[Suggestion]:
    """Best candidate source for every application signal without a mapping.

    Hardware channels are scanned before fieldbus registers; on equal
    scores the first candidate wins. Candidates must share the signal type
    and score above MIN_SCORE.

    Returns:
        Suggestions sorted by score, highest first
    """
    device_names = {d.id: d.instance_name for d in config.devices}
    # (source, id, display name, names to compare, tag, signal type)
    candidates = [
        (
            MappingSource.HW,
            ch.id,
            ch.terminal,
            (ch.terminal, ch.description),
            ch.tag,
            ch.signal_type,
        )
        for ch in config.unmapped_channels()
    ]
    candidates.extend(
        (
            MappingSource.COM,
            reg.id,
            f"{device_names.get(reg.device_id, '?')}.{reg.name}",
            (reg.name, reg.description),
            reg.tag,
            reg.signal_type,
        )
        for reg in config.unmapped_registers()
    )

    suggestions: list[Suggestion] = []
    for app in config.unmapped_signals(signals):
        best: Suggestion | None = None
        for source, source_id, source_name, names, tag, signal_type in candidates:
            if signal_type is not app.signal_type:
                continue
            score, reason = _score(names, tag, app.signal_name)
            if score > MIN_SCORE and (best is None or score > best.score):
                best = Suggestion(
                    source=source,
                    source_id=source_id,
                    source_name=source_name,
                    app_signal_id=app.id,
                    app_name=app.path,
                    score=score,
                    reason=reason,
                )
        if best is not None:
            suggestions.append(best)

    suggestions.sort(key=lambda s: s.score, reverse=True)
    return suggestions


def accept_suggestions(
    manager: MappingManager, suggestions: list[Suggestion]
) -> list[Mapping]:
    """Bind suggestions through the manager.

    A source proposed for several signals is bound only once, to the first
    (highest scored) suggestion.

    Returns:
        The created mappings
    """
    used: set[tuple[MappingSource, str]] = set()
    created: list[Mapping] = []

    for suggestion in suggestions:
        key = (suggestion.source, suggestion.source_id)
        if key in used:
            logger.debug(
                "Skipping suggestion for already used source",
                source_id=suggestion.source_id,
                app_signal_id=suggestion.app_signal_id,
            )
            continue
        used.add(key)
        created.append(
            manager.bind(
                suggestion.source_id,
                suggestion.source,
                suggestion.app_signal_id,
                notes=f"Auto-suggested: {suggestion.reason}",
            )
        )

    logger.info("Suggestions accepted", accepted=len(created), offered=len(suggestions))
    return created
