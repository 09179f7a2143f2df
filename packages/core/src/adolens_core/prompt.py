"""Review prompt construction.

``build_prompt`` is a pure function of the change record and the review
settings, so the same input always produces the same instruction text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from adolens_core.models import FOCUS_AREAS

if TYPE_CHECKING:
    from adolens_core.models import ChangeRecord, ReviewSettings

FULL_FILE_LIMIT = 20000
ADDITIONS_LIMIT = 15000

FOCUS_PHRASES = {
    "bugs": "bugs, logic errors, and potential runtime issues",
    "security": "security vulnerabilities (SQL injection, XSS, auth issues, etc.)",
    "performance": "performance issues and inefficiencies",
    "style": "code style and best practices",
    "naming": "naming conventions and clarity",
    "docs": "missing documentation and comments",
    "tests": "test coverage concerns",
}

DEPTH_INSTRUCTIONS = {
    "quick": "Focus only on critical issues. Be brief.",
    "standard": "Provide a balanced review covering important issues.",
    "thorough": "Do an in-depth analysis. Check every detail. Be comprehensive.",
}

_CONTEXTUAL_CHECKS = """CONTEXTUAL ANALYSIS - Flag these issues:
- **Unused exports**: If a new function/class/constant is exported, flag it as needing to be consumed somewhere in the PR
- **Incomplete implementations**: New functions that are declared but might not be called/used
- **Missing imports**: If new code references something that appears to need importing
- **Orphaned code**: New code that doesn't seem to integrate with anything
- **API contracts**: New exported functions should have clear contracts (types, docs)
- **Dead code**: New code paths that can never be reached
- **Missing error handling**: New async functions without try-catch, new promises without .catch()
- **Unfinished TODOs**: New TODO/FIXME comments that should be addressed before merge"""

_PR_CHECKS = """PR-SPECIFIC CHECKS:
- If a new function is exported, ask: "Is this export consumed elsewhere in the PR?"
- If a new interface/type is defined, ask: "Is this type used in the PR?"
- If a new constant is exported, ask: "Where is this constant used?"
- Flag any new public API that lacks documentation"""

_RESPONSE_FORMAT = """RESPONSE FORMAT (JSON object with summary and issues):
{
  "summary": {
    "description": "<2-3 sentence summary of what this code change does>",
    "mainChanges": ["<change 1>", "<change 2>", ...],
    "newExports": ["<list of new exported functions/classes/constants>"],
    "riskLevel": "low" | "medium" | "high"
  },
  "issues": [
    {
      "line": <line number or range like "10-15">,
      "severity": "critical" | "warning" | "suggestion",
      "category": "bug" | "security" | "performance" | "style" | "unused-export" | "incomplete" | "documentation",
      "title": "<brief title>",
      "description": "<detailed explanation>",
      "suggestion": "<how to fix, include code if helpful>"
    }
  ]
}

If no issues found, return: {"summary": {...}, "issues": []}

IMPORTANT: Return ONLY valid JSON object, no markdown or extra text."""


def focus_phrases(settings: ReviewSettings) -> list[str]:
    return [FOCUS_PHRASES[area] for area in FOCUS_AREAS if area in settings.focus_areas]


def _requirements(settings: ReviewSettings, scope_line: str) -> str:
    depth = DEPTH_INSTRUCTIONS.get(settings.depth, DEPTH_INSTRUCTIONS["standard"])
    return f"""CRITICAL REVIEW REQUIREMENTS:
1. {scope_line}
2. {depth}
3. Focus areas: {', '.join(focus_phrases(settings))}

FIRST: Provide a brief SUMMARY of what this change does (2-3 sentences max).

{_CONTEXTUAL_CHECKS}

{_PR_CHECKS}

{_RESPONSE_FORMAT}"""


def _full_file_prompt(record: ChangeRecord, settings: ReviewSettings) -> str:
    original = (record.original_content or "")[:FULL_FILE_LIMIT]
    new = (record.new_content or "")[:FULL_FILE_LIMIT]
    return f"""You are an expert code reviewer performing a Pull Request review.

FILE: {record.filename}
CHANGE TYPE: {record.change_type}

I will provide the ORIGINAL code and the NEW code.
1. Identify the changes between the two versions.
2. Review ONLY the NEW/CHANGED code.

ORIGINAL CODE:
```
{original}
```

NEW CODE:
```
{new}
```

{_requirements(settings, "Review ONLY the new/changed code - ignore unchanged code")}"""


def _additions_prompt(record: ChangeRecord, settings: ReviewSettings) -> str:
    if record.additions:
        code = "\n".join(a.content for a in record.additions)
    else:
        code = record.content
    return f"""You are an expert code reviewer performing a Pull Request review. Review ONLY the NEW/CHANGED CODE below.

FILE: {record.filename}
LINES ADDED: {len(record.additions)}

NEW/CHANGED CODE (review ONLY this - these are the additions in the PR):
```
{code[:ADDITIONS_LIMIT]}
```

{_requirements(settings, "Review ONLY the new/changed code shown above - ignore any existing code")}"""


def build_prompt(record: ChangeRecord, settings: ReviewSettings) -> str:
    """Render the review instructions for one change record."""
    if record.is_full_file:
        return _full_file_prompt(record, settings)
    return _additions_prompt(record, settings)
