"""System prompts and user prompt builders for the three review categories.

Every prompt pins the reply to one finding per line in the form
``FILE:LINE_START-LINE_END | SEVERITY | MESSAGE``.
"""

from __future__ import annotations

from lookout.domain.review.value_objects import ChangedFilePayload, ReviewPayload
from lookout.shared.constants import PROMPT_MAX_FILE_LINES
from lookout.shared.types import ReviewCategory

# =============================================================================
# SYSTEM PROMPTS
# =============================================================================

ARCHITECTURE_SYSTEM_PROMPT = """\
You are a senior software architect reviewing code changes.

RULES:
1. Only comment on architectural concerns:
   - Code organization and structure
   - Design patterns and how they are used
   - Separation of concerns
   - Module coupling and cohesion
   - API design and interfaces
   - Data flow and state management
2. Cite the exact file path and line numbers for every comment.
3. If you cannot determine the exact line numbers, do not comment.
4. Write each comment on its own line as:
   FILE:LINE_START-LINE_END | SEVERITY | MESSAGE
5. Severity levels:
   - info: suggestion for improvement
   - warning: potential design issue
   - critical: severe architectural problem
6. If there are no architectural issues, say "No architectural concerns found."

Do NOT comment on security, code style, performance or testing approaches.
"""

SECURITY_SYSTEM_PROMPT = """\
You are a security expert reviewing code for vulnerabilities.

RULES:
1. Only comment on security concerns:
   - Authentication and authorization
   - Input validation and sanitization
   - SQL injection, XSS and CSRF risks
   - Sensitive data exposure
   - Cryptography usage
   - Access control and API security
2. Cite the exact file path and line numbers for every comment.
3. If you lack the context to judge, say "Insufficient context to assess \
security at LINE X".
4. Write each comment on its own line as:
   FILE:LINE_START-LINE_END | SEVERITY | MESSAGE
5. Severity levels:
   - info: security best-practice suggestion
   - warning: potential security risk
   - critical: definite vulnerability
6. If the code looks secure, say "No security issues found."

Do NOT comment on architecture, code quality, style or performance.
"""

MAINTAINABILITY_SYSTEM_PROMPT = """\
You are a code quality expert reviewing for maintainability.

RULES:
1. Only comment on maintainability:
   - Function and class complexity
   - Code duplication
   - Naming clarity
   - Error handling
   - Testability
   - Documentation needs
   - Coupling between components
2. Cite the exact file path and line numbers for every comment.
3. Write each comment on its own line as:
   FILE:LINE_START-LINE_END | SEVERITY | MESSAGE
4. Severity levels:
   - info: code quality suggestion
   - warning: maintainability concern
   - critical: will make the code hard to maintain
5. If the code is maintainable, say "Code is well-structured and maintainable."

Do NOT comment on security, high-level architecture, or performance unless \
it affects readability.
"""

SYSTEM_PROMPTS: dict[ReviewCategory, str] = {
    ReviewCategory.ARCHITECTURE: ARCHITECTURE_SYSTEM_PROMPT,
    ReviewCategory.SECURITY: SECURITY_SYSTEM_PROMPT,
    ReviewCategory.MAINTAINABILITY: MAINTAINABILITY_SYSTEM_PROMPT,
}

# Security reviews run coolest, maintainability warmest.
CATEGORY_TEMPERATURES: dict[ReviewCategory, float] = {
    ReviewCategory.ARCHITECTURE: 0.3,
    ReviewCategory.SECURITY: 0.2,
    ReviewCategory.MAINTAINABILITY: 0.4,
}

_TASKS: dict[ReviewCategory, list[str]] = {
    ReviewCategory.ARCHITECTURE: [
        "Review the architecture of the changed files. Focus on:",
        "- Are responsibilities properly separated?",
        "- Are the right abstractions being used?",
        "- Is there tight coupling that should be avoided?",
        "- Is there a better design pattern for this use case?",
        "",
        "Provide specific, actionable feedback with file paths and line numbers.",
    ],
    ReviewCategory.SECURITY: [
        "Review for security vulnerabilities:",
        "- Is input validation missing?",
        "- Can authentication or authorization be bypassed?",
        "- Is sensitive data exposed?",
        "- Are there injection vulnerabilities (SQL, XSS, etc.)?",
        "- Is cryptography or secrets handling insecure?",
        "",
        'If you cannot judge security with the given context, state "Insufficient '
        'context".',
    ],
    ReviewCategory.MAINTAINABILITY: [
        "Review code quality and maintainability:",
        "- Are functions too long or complex?",
        "- Is there code duplication?",
        "- Are variable and function names clear?",
        "- Is error handling sufficient?",
        "- Is the code testable?",
        "- Would another developer find this easy to understand?",
    ],
}

# =============================================================================
# USER PROMPTS
# =============================================================================


def _code_block(content: str) -> list[str]:
    lines = content.split("\n")
    block = ["**Code:**", "```typescript", *lines[:PROMPT_MAX_FILE_LINES]]
    if len(lines) > PROMPT_MAX_FILE_LINES:
        block.append("... (truncated)")
    block.append("```")
    return block


def _line_ranges(lines: list[int]) -> str:
    """Collapse sorted line numbers into ranges: ``[3, 4, 5, 9]`` -> ``3-5, 9``."""
    spans: list[tuple[int, int]] = []
    for line in lines:
        if spans and line == spans[-1][1] + 1:
            spans[-1] = (spans[-1][0], line)
        else:
            spans.append((line, line))
    return ", ".join(str(a) if a == b else f"{a}-{b}" for a, b in spans)


def _changed_file_section(
    category: ReviewCategory, file: ChangedFilePayload
) -> list[str]:
    section = [f"### {file.path}", f"Changes: +{file.additions}/-{file.deletions}"]
    if file.changed_lines:
        section.append(f"Changed lines: {_line_ranges(file.changed_lines)}")
    if file.roles:
        section.append(f"Role: {', '.join(file.roles)}")

    if file.is_critical and category is ReviewCategory.SECURITY:
        section.append("**CRITICAL FILE** - extra security scrutiny required")
    elif file.is_critical and category is ReviewCategory.ARCHITECTURE:
        section.append("**CRITICAL FILE**")
    section.append("")

    if category is ReviewCategory.ARCHITECTURE:
        section.append("**Dependencies:**")
        section.append(f"- Imports: {', '.join(file.imports) or 'none'}")
        section.append(f"- Exports: {', '.join(file.exports) or 'none'}")
        if file.definitions:
            section.append(f"- Defines: {', '.join(file.definitions)}")
        section.append("")

    section.extend(_code_block(file.content))
    section.append("")
    return section


def build_user_prompt(category: ReviewCategory, payload: ReviewPayload) -> str:
    """Render the payload as the user prompt for one category.

    Only the first lines of each changed file are included. Context files
    are listed by path and reason for the architecture review.
    """
    sections = [f"# {category.title()} Review", "", "## Changed Files", ""]

    for file in payload.changed_files:
        sections.extend(_changed_file_section(category, file))

    if category is ReviewCategory.ARCHITECTURE and payload.context_files:
        sections.append("## Context Files (for reference)")
        sections.append("")
        for context in payload.context_files:
            sections.append(f"### {context.path}")
            sections.append(f"Relevance: {context.reason}")
            sections.append("")

    sections.append("## Your Task")
    sections.extend(_TASKS[category])
    return "\n".join(sections)
