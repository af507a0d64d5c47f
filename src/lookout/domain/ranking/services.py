"""Relevance ranking over the import graph.

Changed files seed a breadth-first traversal. The base score falls as
1 / (distance + 1); files that import the current file (reverse edges) get a
further boost over files it merely imports.

Selection then takes the highest-scoring files under a file cap and a fixed
per-file token estimate.
"""

from __future__ import annotations

import logging
import re

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, replace

from lookout.domain.context.value_objects import FileStructure
from lookout.domain.diff.services import estimate_complexity, is_critical
from lookout.domain.diff.value_objects import ChangedFile
from lookout.domain.ranking.value_objects import ScoredFile, SelectionResult
from lookout.shared.constants import (
    CRITICAL_MULTIPLIER,
    DEFAULT_MAX_CONTEXT_FILES,
    DEFAULT_MAX_DISTANCE,
    DEFAULT_MAX_TOKENS,
    PER_FILE_TOKEN_ESTIMATE,
    REVERSE_DEPENDENCY_BOOST,
)
from lookout.shared.types import Complexity, FilePath, TokenCount

logger = logging.getLogger(__name__)

# =============================================================================
# WEIGHTS
# =============================================================================

COMPLEXITY_MULTIPLIERS: dict[Complexity, float] = {
    Complexity.LOW: 1.0,
    Complexity.MEDIUM: 1.1,
    Complexity.HIGH: 1.2,
}

# (pattern, weight) pairs; every matching pattern multiplies the score.
FILE_TYPE_WEIGHTS: tuple[tuple[re.Pattern[str], float], ...] = (
    (re.compile(r"/utils?/|/helpers?/|/lib/", re.IGNORECASE), 1.3),
    (re.compile(r"/hooks?/|use[A-Z]", re.IGNORECASE), 1.2),
    (re.compile(r"\.(test|spec)\.(ts|tsx|js|jsx)$"), 0.8),
    (re.compile(r"\.config\.(ts|js)$"), 0.7),
    (re.compile(r"/api/|/routes?/|middleware", re.IGNORECASE), 1.2),
)

CHANGED_REASON = "Changed in this PR"

_LOW_STRUCTURE_LIMIT = 5
_MEDIUM_STRUCTURE_LIMIT = 15

# =============================================================================
# SCORING HELPERS
# =============================================================================


def base_score(distance: int, critical: bool, complexity: Complexity) -> float:
    """Relevance before file-type weighting.

    ``1 / (distance + 1)``, times 1.5 for critical files, times the
    complexity multiplier.
    """
    score = 1 / (distance + 1)
    if critical:
        score *= CRITICAL_MULTIPLIER
    return score * COMPLEXITY_MULTIPLIERS[complexity]


def complexity_from_structure(structure: FileStructure) -> Complexity:
    """Bucket an unchanged file by how many imports and exports it has."""
    size = len(structure.imports) + len(structure.exports)
    if size < _LOW_STRUCTURE_LIMIT:
        return Complexity.LOW
    if size < _MEDIUM_STRUCTURE_LIMIT:
        return Complexity.MEDIUM
    return Complexity.HIGH


def file_type_weight(path: str) -> float:
    weight = 1.0
    for pattern, factor in FILE_TYPE_WEIGHTS:
        if pattern.search(path):
            weight *= factor
    return weight


def _basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


# =============================================================================
# RANKER
# =============================================================================


@dataclass
class RelevanceRanker:
    """Scores files by graph distance from a change and selects a budgeted set.

    Deterministic: the same inputs always give the same scores, distances and
    selection order.
    """

    max_distance: int = DEFAULT_MAX_DISTANCE

    def __post_init__(self) -> None:
        if self.max_distance < 0:
            msg = f"max_distance must be non-negative, got {self.max_distance}"
            raise ValueError(msg)

    def build_scores(
        self,
        changed_files: list[ChangedFile],
        structures: Mapping[FilePath, FileStructure],
    ) -> list[ScoredFile]:
        """Breadth-first traversal from the changed files.

        A file is scored at its first discovery and never revisited, so its
        distance is the shortest hop count. Forward edges are explored only
        toward files with a known structure. Reverse edges skip changed
        files, which are already seeded.

        Args:
            changed_files: Files touched by the pull request.
            structures: Parsed structure of every file visible to the job.

        Returns:
            Scored files in discovery order.
        """
        scores: dict[FilePath, ScoredFile] = {}
        changed_paths = {f.path for f in changed_files}
        queue: deque[tuple[FilePath, int]] = deque()

        for file in changed_files:
            if file.path in scores:
                continue
            critical = is_critical(file.path)
            complexity = estimate_complexity(file)
            scores[file.path] = ScoredFile(
                path=file.path,
                score=base_score(0, critical, complexity),
                distance=0,
                reason=CHANGED_REASON,
                is_critical=critical,
                complexity=complexity,
            )
            queue.append((file.path, 0))

        while queue:
            current, distance = queue.popleft()
            if distance >= self.max_distance:
                continue

            structure = structures.get(current)
            if structure is None:
                continue

            next_distance = distance + 1

            for dep_path in sorted(structure.dependencies):
                if dep_path in scores:
                    continue
                dep_structure = structures.get(dep_path)
                if dep_structure is None:
                    continue

                critical = is_critical(dep_path)
                complexity = complexity_from_structure(dep_structure)
                scores[dep_path] = ScoredFile(
                    path=dep_path,
                    score=base_score(next_distance, critical, complexity),
                    distance=next_distance,
                    reason=f"Imported by {_basename(current)}",
                    is_critical=critical,
                    complexity=complexity,
                )
                queue.append((dep_path, next_distance))

            for path, other in structures.items():
                if path in scores or path in changed_paths:
                    continue
                if not other.depends_on(current):
                    continue

                critical = is_critical(path)
                complexity = complexity_from_structure(other)
                scores[path] = ScoredFile(
                    path=path,
                    score=base_score(next_distance, critical, complexity)
                    * REVERSE_DEPENDENCY_BOOST,
                    distance=next_distance,
                    reason=f"Imports {_basename(current)} (changed)",
                    is_critical=critical,
                    complexity=complexity,
                )
                queue.append((path, next_distance))

        logger.debug(
            "Scored %d files from %d changed files", len(scores), len(changed_files)
        )
        return list(scores.values())

    def apply_file_type_weights(
        self,
        scored: list[ScoredFile],
        structures: Mapping[FilePath, FileStructure],
    ) -> list[ScoredFile]:
        """Boost utility, hook and API files; dampen tests and config.

        Files without a known structure keep their score unchanged.
        """
        weighted: list[ScoredFile] = []
        for file in scored:
            if file.path not in structures:
                weighted.append(file)
                continue
            weight = file_type_weight(file.path)
            weighted.append(replace(file, score=file.score * weight))
        return weighted

    def select(
        self,
        scored: list[ScoredFile],
        max_files: int = DEFAULT_MAX_CONTEXT_FILES,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> SelectionResult:
        """Greedily take the highest-scoring files under both bounds.

        Every file costs the same fixed token estimate. Selection stops at the
        first file that would exceed either bound; later, lower-scored files
        are never considered.
        """
        ordered = sorted(scored, key=lambda f: f.score, reverse=True)

        selected: list[ScoredFile] = []
        tokens = TokenCount(0)
        by_distance: dict[int, int] = {}
        critical_count = 0

        for file in ordered:
            if len(selected) >= max_files:
                break
            if tokens + PER_FILE_TOKEN_ESTIMATE > max_tokens:
                break

            selected.append(file)
            tokens += PER_FILE_TOKEN_ESTIMATE
            by_distance[file.distance] = by_distance.get(file.distance, 0) + 1
            if file.is_critical:
                critical_count += 1

        return SelectionResult(
            files=selected,
            estimated_tokens=tokens,
            by_distance=by_distance,
            critical_count=critical_count,
            total_candidates=len(scored),
        )

    def rank(
        self,
        changed_files: list[ChangedFile],
        structures: Mapping[FilePath, FileStructure],
        max_files: int = DEFAULT_MAX_CONTEXT_FILES,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> SelectionResult:
        """Score, weight and select in one call."""
        scored = self.build_scores(changed_files, structures)
        weighted = self.apply_file_type_weights(scored, structures)
        selection = self.select(weighted, max_files=max_files, max_tokens=max_tokens)
        logger.info(
            "Selected %d of %d candidate files (%d tokens)",
            len(selection.files),
            selection.total_candidates,
            selection.estimated_tokens,
        )
        return selection


# =============================================================================
# PRESENTATION
# =============================================================================


def group_by_module(files: list[ScoredFile]) -> dict[str, list[ScoredFile]]:
    """Group files by their parent directory name.

    Files less than two directories deep fall under ``root``.
    """
    groups: dict[str, list[ScoredFile]] = {}
    for file in files:
        parts = file.path.split("/")
        module = parts[-2] if len(parts) > 2 else "root"
        groups.setdefault(module, []).append(file)
    return groups


def explain_selection(selection: SelectionResult) -> str:
    """Human-readable account of which files were chosen and why."""
    lines = ["Context Selection Strategy:", ""]

    by_distance: dict[int, list[ScoredFile]] = {}
    for file in selection.files:
        by_distance.setdefault(file.distance, []).append(file)

    for distance in sorted(by_distance):
        files = by_distance[distance]
        if distance == 0:
            label = "Changed Files"
        else:
            kind = "direct" if distance == 1 else "indirect"
            label = f"Distance {distance} ({kind} dependencies)"

        lines.append(f"{label}: {len(files)} files")
        for f in files:
            lines.append(
                f"  • {_basename(f.path)} (score: {f.score:.2f}) - {f.reason}"
            )
        lines.append("")

    average = (
        sum(f.score for f in selection.files) / len(selection.files)
        if selection.files
        else 0.0
    )
    lines.append("Summary:")
    lines.append(f"  • Total files: {len(selection.files)}")
    lines.append(f"  • Critical files: {selection.critical_count}")
    lines.append(f"  • Average relevance: {average:.2f}")

    modules = group_by_module(selection.files)
    if modules:
        counts = ", ".join(f"{name} ({len(fs)})" for name, fs in modules.items())
        lines.append(f"  • Modules: {counts}")

    return "\n".join(lines)
