"""Context assembly: from a pull request's diff to a review payload."""

from __future__ import annotations

import logging

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from lookout.application.dto import BuildContextCommand, ContextStats, PRContext
from lookout.domain.context.repositories import StructureParser
from lookout.domain.context.value_objects import FileStructure
from lookout.domain.diff.services import (
    CODE_LANGUAGE_GROUPS,
    categorize_by_language,
    classify_changed_files,
    estimate_complexity,
    extract_changed_lines,
    is_critical,
)
from lookout.domain.diff.value_objects import ChangedFile, DiffClassification
from lookout.domain.ranking.services import RelevanceRanker, explain_selection
from lookout.domain.ranking.value_objects import SelectionResult
from lookout.domain.review.repositories import CodeHost
from lookout.domain.review.value_objects import (
    ChangedFilePayload,
    ContextFilePayload,
    ImpactAssessment,
    ImpactLevel,
    ReviewPayload,
)
from lookout.shared.constants import (
    DEFAULT_MAX_CONTEXT_FILES,
    DEFAULT_MAX_FETCHED_FILES,
    DEFAULT_MAX_TOKENS,
)
from lookout.shared.exceptions import FileFetchError
from lookout.shared.types import Complexity, FilePath

logger = logging.getLogger(__name__)

# =============================================================================
# IMPACT THRESHOLDS
# =============================================================================

_CRITICAL_FILE_POINTS = 10
_LARGE_CHANGESET_LINES = 500
_MEDIUM_CHANGESET_LINES = 200
_MANY_FILES = 10
_WIDE_CONTEXT = 10
_MODERATE_CONTEXT = 5

_LEVEL_THRESHOLDS: tuple[tuple[int, ImpactLevel], ...] = (
    (40, ImpactLevel.CRITICAL),
    (25, ImpactLevel.HIGH),
    (15, ImpactLevel.MEDIUM),
)

# =============================================================================
# PAYLOAD
# =============================================================================


def generate_context_summary(
    classification: DiffClassification, selection: SelectionResult
) -> str:
    """Markdown overview of the change and the chosen context."""
    changed = classification.reviewable
    changed_paths = {f.path for f in changed}
    stats = classification.stats

    lines = [
        "# Pull Request Context",
        "",
        "## Changed Files",
        f"Total: {len(changed)} files changed",
        f"Additions: +{stats.total_additions}",
        f"Deletions: -{stats.total_deletions}",
        "",
        "## Files to Review",
    ]

    for file in changed:
        scored = selection.get(file.path)
        marker = " [CRITICAL]" if scored is not None and scored.is_critical else ""
        lines.append(f"- {file.path} (+{file.additions}/-{file.deletions}){marker}")

    lines.append("")
    lines.append("## Context Files (for reference)")

    context_only = [f for f in selection.files if f.path not in changed_paths]
    if context_only:
        for scored in context_only:
            lines.append(
                f"- {scored.path} (distance: {scored.distance}, "
                f"score: {scored.score:.2f})"
            )
            lines.append(f"  Reason: {scored.reason}")
    else:
        lines.append("(none - reviewing only changed files)")

    lines.append("")
    lines.append("## Analysis Stats")
    lines.append(f"- Total files analyzed: {selection.total_candidates}")
    lines.append(f"- Context files selected: {len(selection.files)}")
    lines.append(f"- Critical files: {selection.critical_count}")
    lines.append(f"- Estimated tokens: {selection.estimated_tokens}")

    return "\n".join(lines)


def assemble_payload(
    classification: DiffClassification,
    structures: Mapping[FilePath, FileStructure],
    contents: Mapping[FilePath, str],
    selection: SelectionResult,
) -> ReviewPayload:
    """Merge diff, structure and selection into what the reviewer sees.

    Every reviewable changed file is included, with empty content if it
    could not be fetched. Selected files that were not changed become
    context files.

    Args:
        classification: Partitioned changed files.
        structures: Parsed structure per analyzed file.
        contents: Fetched text per file.
        selection: Ranked context selection.

    Returns:
        The review payload.
    """
    changed_paths = {f.path for f in classification.reviewable}

    changed_files: list[ChangedFilePayload] = []
    for file in classification.reviewable:
        structure = structures.get(file.path)
        scored = selection.get(file.path)
        changed_files.append(
            ChangedFilePayload(
                path=file.path,
                content=contents.get(file.path, ""),
                patch=file.patch,
                additions=file.additions,
                deletions=file.deletions,
                is_critical=scored.is_critical if scored is not None else False,
                imports=structure.import_sources if structure else [],
                exports=structure.export_names if structure else [],
                definitions=structure.definitions.names if structure else [],
                roles=structure.file_type.roles if structure else [],
                changed_lines=extract_changed_lines(file.patch).added,
            )
        )

    context_files = [
        ContextFilePayload(
            path=scored.path,
            content=contents.get(scored.path, ""),
            relevance_score=scored.score,
            reason=scored.reason,
        )
        for scored in selection.files
        if scored.path not in changed_paths
    ]

    return ReviewPayload(
        changed_files=changed_files,
        context_files=context_files,
        summary=generate_context_summary(classification, selection),
    )


def count_roles(structures: Iterable[FileStructure]) -> dict[str, int]:
    """Count analyzed files per role hint. A file can have several roles."""
    counts: dict[str, int] = {}
    for structure in structures:
        for role in structure.file_type.roles:
            counts[role] = counts.get(role, 0) + 1
    return counts


def calculate_impact(
    classification: DiffClassification,
    selection: SelectionResult,
    critical_files: int,
) -> ImpactAssessment:
    """Score how risky a pull request looks. Advisory only, never a gate.

    Args:
        classification: Partitioned changed files.
        selection: Ranked context selection.
        critical_files: Number of analyzed changed files on critical paths.
    """
    score = 0
    factors: list[str] = []

    if critical_files > 0:
        score += critical_files * _CRITICAL_FILE_POINTS
        factors.append(f"{critical_files} critical files")

    total_changes = classification.stats.total_changes
    if total_changes > _LARGE_CHANGESET_LINES:
        score += 15
        factors.append("Large changeset")
    elif total_changes > _MEDIUM_CHANGESET_LINES:
        score += 10

    if len(classification.reviewable) > _MANY_FILES:
        score += 10
        factors.append("Many files modified")

    context_count = len(selection.files) - len(classification.reviewable)
    if context_count > _WIDE_CONTEXT:
        score += 15
        factors.append("Wide-reaching changes")
    elif context_count > _MODERATE_CONTEXT:
        score += 10

    level = next(
        (lvl for threshold, lvl in _LEVEL_THRESHOLDS if score >= threshold),
        ImpactLevel.LOW,
    )
    return ImpactAssessment(score=score, level=level, factors=factors)


# =============================================================================
# USE CASE
# =============================================================================


@dataclass
class ContextBuilder:
    """Builds the review context for one pull request.

    Steps:
    1. List and classify changed files
    2. Fetch and parse reviewable code files
    3. Follow relative imports on the code host, up to ``max_distance``
       hops and ``max_fetched_files`` extra fetches
    4. Rank, select and assemble the payload
    """

    parser: StructureParser
    ranker: RelevanceRanker
    max_context_files: int = DEFAULT_MAX_CONTEXT_FILES
    max_tokens: int = DEFAULT_MAX_TOKENS
    max_fetched_files: int = DEFAULT_MAX_FETCHED_FILES

    def build(self, host: CodeHost, cmd: BuildContextCommand) -> PRContext:
        """Build context for the pull request at ``cmd.head_sha``.

        Raises:
            CodeHostError: If listing files or fetching a changed file fails.
        """
        logger.info("Building PR context for %s#%d", cmd.repository, cmd.pr_number)

        files = host.list_pull_request_files(cmd.repository, cmd.pr_number)
        classification = classify_changed_files(files)
        logger.info(
            "Found %d reviewable files out of %d total",
            classification.stats.reviewable_files,
            classification.stats.total_files,
        )

        groups = categorize_by_language(classification.reviewable)
        code_files = [
            file
            for group in groups
            if group in CODE_LANGUAGE_GROUPS
            for file in groups[group]
        ]

        contents = self._fetch_changed(host, cmd, code_files)
        fetched = self._expand_dependencies(host, cmd, contents)

        known_paths = frozenset(contents)
        structures = {
            path: self.parser.parse(path, text, known_paths)
            for path, text in contents.items()
        }
        critical_files = sum(
            1 for f in code_files if f.path in contents and is_critical(f.path)
        )

        selection = self.ranker.rank(
            classification.reviewable,
            structures,
            max_files=self.max_context_files,
            max_tokens=self.max_tokens,
        )
        payload = assemble_payload(classification, structures, contents, selection)
        impact = calculate_impact(classification, selection, critical_files)

        stats = ContextStats(
            total_files=classification.stats.total_files,
            reviewable_files=classification.stats.reviewable_files,
            critical_files=critical_files,
            total_additions=classification.stats.total_additions,
            total_deletions=classification.stats.total_deletions,
            analyzed_files=len(structures),
            fetched_dependencies=fetched,
            language_breakdown={str(g): len(fs) for g, fs in groups.items()},
            role_breakdown=count_roles(structures.values()),
        )
        logger.info(
            "Context built: %d files selected, %d estimated tokens, impact %s",
            len(selection.files),
            selection.estimated_tokens,
            impact.level,
        )

        return PRContext(
            head_sha=cmd.head_sha,
            classification=classification,
            selection=selection,
            payload=payload,
            impact=impact,
            stats=stats,
            explanation=explain_selection(selection),
        )

    def _fetch_changed(
        self,
        host: CodeHost,
        cmd: BuildContextCommand,
        code_files: list[ChangedFile],
    ) -> dict[FilePath, str]:
        contents: dict[FilePath, str] = {}
        for file in code_files:
            text = host.get_file_content(cmd.repository, file.path, cmd.head_sha)
            if not text:
                logger.warning("Could not fetch content for %s", file.path)
                continue
            contents[file.path] = text

            if estimate_complexity(file) is Complexity.HIGH:
                logger.info(
                    "High complexity change in %s: +%d/-%d",
                    file.path,
                    file.additions,
                    file.deletions,
                )
        return contents

    def _expand_dependencies(
        self,
        host: CodeHost,
        cmd: BuildContextCommand,
        contents: dict[FilePath, str],
    ) -> int:
        """Fetch files reachable through relative imports, breadth first.

        Candidates for each import are tried in order until one exists.
        Fetch failures are logged and treated as missing files. Adds fetched
        files to ``contents`` and returns the number of fetch attempts.
        """
        missing: set[FilePath] = set()
        attempts = 0
        frontier = list(contents)

        for _ in range(self.ranker.max_distance):
            next_frontier: list[FilePath] = []
            for path in frontier:
                structure = self.parser.parse(path, contents[path])
                for edge in structure.imports:
                    candidates = self.parser.import_candidates(edge.source, path)
                    for candidate in candidates:
                        if candidate in contents:
                            break
                        if candidate in missing:
                            continue
                        if attempts >= self.max_fetched_files:
                            logger.debug(
                                "Fetch limit of %d reached", self.max_fetched_files
                            )
                            return attempts

                        attempts += 1
                        text = self._fetch_related(host, cmd, candidate)
                        if text:
                            contents[candidate] = text
                            next_frontier.append(candidate)
                            break
                        missing.add(candidate)
            if not next_frontier:
                break
            frontier = next_frontier

        logger.debug("Tried %d related paths", attempts)
        return attempts

    def _fetch_related(
        self, host: CodeHost, cmd: BuildContextCommand, path: FilePath
    ) -> str | None:
        try:
            return host.get_file_content(cmd.repository, path, cmd.head_sha)
        except FileFetchError as exc:
            logger.warning("Skipping related file %s: %s", path, exc)
            return None
