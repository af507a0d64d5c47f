"""Domain services for the Diff bounded context.

Pure functions over a pull request's raw changed-file list: which files to
review, which to keep only as background, which to drop entirely, and how
risky each change looks.
"""

from __future__ import annotations

import re

from lookout.domain.diff.value_objects import (
    ChangedFile,
    ChangedLines,
    DiffClassification,
    DiffStats,
    LanguageGroup,
)
from lookout.shared.types import Complexity

# =============================================================================
# PATH PATTERNS
# =============================================================================

IGNORED_FILE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Lock files
    re.compile(r"package-lock\.json$"),
    re.compile(r"yarn\.lock$"),
    re.compile(r"pnpm-lock\.yaml$"),
    re.compile(r"composer\.lock$"),
    re.compile(r"Gemfile\.lock$"),
    re.compile(r"poetry\.lock$"),
    # Build output
    re.compile(r"^dist/"),
    re.compile(r"^build/"),
    re.compile(r"^out/"),
    re.compile(r"^\.next/"),
    re.compile(r"^coverage/"),
    # Minified bundles and source maps
    re.compile(r"\.min\.(js|css)$"),
    re.compile(r"\.bundle\.js$"),
    re.compile(r"\.map$"),
    # OS and vendored artifacts
    re.compile(r"^\.DS_Store$"),
    re.compile(r"^Thumbs\.db$"),
    re.compile(r"node_modules/"),
    # Binaries
    re.compile(r"\.(png|jpg|jpeg|gif|ico|pdf|zip|tar|gz)$"),
    # Generated code
    re.compile(r"\.generated\.(ts|js|tsx|jsx)$"),
    re.compile(r"\.g\.(ts|js)$"),
)

CONTEXT_ONLY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\.env"),
    re.compile(r"\.config\.(js|ts|json)$"),
    re.compile(r"^package\.json$"),
    re.compile(r"^tsconfig\.json$"),
)

CRITICAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"auth", re.IGNORECASE),
    re.compile(r"security", re.IGNORECASE),
    re.compile(r"payment", re.IGNORECASE),
    re.compile(r"crypto", re.IGNORECASE),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
    re.compile(r"api/.*key", re.IGNORECASE),
    re.compile(r"middleware", re.IGNORECASE),
)

_LANGUAGE_PATTERNS: tuple[tuple[LanguageGroup, re.Pattern[str]], ...] = (
    (LanguageGroup.TYPESCRIPT, re.compile(r"\.ts$")),
    (LanguageGroup.JAVASCRIPT, re.compile(r"\.(js|mjs|cjs)$")),
    (LanguageGroup.REACT, re.compile(r"\.(tsx|jsx)$")),
    (LanguageGroup.STYLES, re.compile(r"\.(css|scss|sass|less)$")),
    (LanguageGroup.CONFIG, re.compile(r"\.(json|yaml|yml|toml)$")),
)

CODE_LANGUAGE_GROUPS = frozenset(
    {LanguageGroup.TYPESCRIPT, LanguageGroup.JAVASCRIPT, LanguageGroup.REACT}
)

_HUNK_START_RE = re.compile(r"\+(\d+)")

# =============================================================================
# COMPLEXITY THRESHOLDS
# =============================================================================

_LOW_CHANGE_LIMIT = 20
_MEDIUM_CHANGE_LIMIT = 100

# =============================================================================
# CLASSIFICATION
# =============================================================================


def should_ignore(path: str) -> bool:
    """Whether a path is a lockfile, build artifact, binary or generated file."""
    return any(pattern.search(path) for pattern in IGNORED_FILE_PATTERNS)


def is_context_only(path: str) -> bool:
    """Whether a path is analyzed for context but never reviewed."""
    return any(pattern.search(path) for pattern in CONTEXT_ONLY_PATTERNS)


def classify_changed_files(files: list[ChangedFile]) -> DiffClassification:
    """Partition a raw changed-file list.

    Ignore patterns take precedence over context-only patterns. Addition and
    deletion totals cover every file, including ignored ones.

    Args:
        files: Changed files as reported by the code host.

    Returns:
        The three partitions plus aggregate counts.
    """
    reviewable: list[ChangedFile] = []
    context_only: list[ChangedFile] = []
    ignored: list[ChangedFile] = []
    total_additions = 0
    total_deletions = 0

    for file in files:
        total_additions += file.additions
        total_deletions += file.deletions

        if should_ignore(file.path):
            ignored.append(file)
        elif is_context_only(file.path):
            context_only.append(file)
        else:
            reviewable.append(file)

    stats = DiffStats(
        total_files=len(files),
        reviewable_files=len(reviewable),
        context_only_files=len(context_only),
        ignored_files=len(ignored),
        total_additions=total_additions,
        total_deletions=total_deletions,
    )
    return DiffClassification(
        reviewable=reviewable,
        context_only=context_only,
        ignored=ignored,
        stats=stats,
    )


def categorize_by_language(
    files: list[ChangedFile],
) -> dict[LanguageGroup, list[ChangedFile]]:
    """Group files by extension; each file lands in exactly one group."""
    groups: dict[LanguageGroup, list[ChangedFile]] = {
        group: [] for group in LanguageGroup
    }
    for file in files:
        group = next(
            (g for g, pattern in _LANGUAGE_PATTERNS if pattern.search(file.path)),
            LanguageGroup.OTHER,
        )
        groups[group].append(file)
    return groups


# =============================================================================
# RISK SIGNALS
# =============================================================================


def estimate_complexity(file: ChangedFile) -> Complexity:
    """Bucket a change by its total changed-line count."""
    total = file.total_changes
    if total < _LOW_CHANGE_LIMIT:
        return Complexity.LOW
    if total < _MEDIUM_CHANGE_LIMIT:
        return Complexity.MEDIUM
    return Complexity.HIGH


def is_critical(path: str) -> bool:
    """Whether a path touches auth, security, payments or similar code."""
    return any(pattern.search(path) for pattern in CRITICAL_PATTERNS)


# =============================================================================
# PATCH PARSING
# =============================================================================


def extract_changed_lines(patch: str) -> ChangedLines:
    """Extract touched line numbers from a unified-diff patch.

    Added and context lines are numbered in the new file. Removed lines
    record the new-file line they sit before, since they have no line of
    their own after the change.
    """
    added: list[int] = []
    removed: list[int] = []
    context: list[int] = []
    current = 0

    for line in patch.split("\n"):
        if line.startswith("@@"):
            match = _HUNK_START_RE.search(line)
            if match:
                current = int(match.group(1))
            continue

        if line.startswith("+") and not line.startswith("+++"):
            added.append(current)
            current += 1
        elif line.startswith("-") and not line.startswith("---"):
            removed.append(current)
        elif line.startswith(" "):
            context.append(current)
            current += 1

    return ChangedLines(added=added, removed=removed, context=context)
