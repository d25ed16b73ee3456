"""Grading prompt assembly.

Section order is fixed: framing, documentation references, explainer,
package identity, numbered rubric, sources, output format. The JSON template
at the end lists every criterion by name in rubric order, which is what lets
the verdict engine read the answers back by position.
"""

from __future__ import annotations

import json

from complens_core.models import RepositoryFile
from complens_core.rubric import DEFAULT_PROFILE, ReviewProfile


def render_docs(profile: ReviewProfile) -> str:
    lines = [f"OFFICIAL {profile.subject.upper()} DOCUMENTATION REFERENCES:"]
    lines += [f"- {title}: {url}" for title, url in profile.docs]
    if profile.key_requirements:
        lines.append("")
        lines.append("KEY REQUIREMENTS FROM DOCS:")
        lines += [f"{i}. {req}" for i, req in enumerate(profile.key_requirements, 1)]
    return "\n".join(lines)


def render_criteria(profile: ReviewProfile) -> str:
    return "\n".join(
        f"{i}. {c.name}: {c.check}{' (CRITICAL)' if c.critical else ''}" for i, c in enumerate(profile.criteria, 1)
    )


def render_files(files: list[RepositoryFile]) -> str:
    return "\n\n".join(f"File: {f.path}\n```typescript\n{f.content}\n```" for f in files)


def render_output_format(profile: ReviewProfile) -> str:
    entries = []
    for c in profile.criteria:
        hint = profile.template_hints.get(c.name, "Your note")
        # json.dumps keeps names with quotes or backslashes valid inside the template.
        entries.append(f'    {{"name": {json.dumps(c.name)}, "passed": true/false, "notes": {json.dumps(hint)}}}')
    criteria_block = ",\n".join(entries)
    return f"""Respond in this exact JSON format:
{{
  "summary": "Your 2-3 sentence summary here",
  "criteria": [
{criteria_block}
  ],
  "suggestions": "Improvement suggestions with references to official docs (e.g., 'See {_first_doc_url(profile)} for...')"
}}"""


def _first_doc_url(profile: ReviewProfile) -> str:
    return profile.docs[0][1] if profile.docs else "the documentation"


def default_instructions(profile: ReviewProfile = DEFAULT_PROFILE) -> str:
    """The built-in framing used when no custom prompt version is active."""
    subject = profile.subject
    return f"""You are reviewing a {subject} package against official {subject} specifications.

{render_docs(profile)}

{profile.explainer}

Analyze this code and provide a structured review with:
1. Overall summary (2-3 sentences about component quality and compliance with official {subject} specs)
2. For each criterion IN THE EXACT ORDER LISTED BELOW, indicate PASS or FAIL with a brief note
3. Suggestions for improvement based on the OFFICIAL DOCUMENTATION REFERENCES above

IMPORTANT:
- Return criteria in the EXACT same order as listed
- Base all suggestions on the official documentation links provided
- For any failed criterion, reference the specific documentation URL that explains the correct approach"""


def build_prompt(
    profile: ReviewProfile,
    package: dict,
    files: list[RepositoryFile],
    instructions: str | None = None,
) -> str:
    """Assemble the single-turn grading request.

    ``package`` carries ``name`` and ``version``. ``instructions`` replaces
    the default framing (an admin-edited prompt version); the rubric, sources
    and output format are always generated from ``profile``.
    """
    framing = instructions.strip() if instructions and instructions.strip() else default_instructions(profile)
    return f"""{framing}

PACKAGE: {package.get("name", "")}
VERSION: {package.get("version", "")}

CRITERIA TO CHECK (in order, marking critical ones):
{render_criteria(profile)}

SOURCE CODE ({profile.definition_file} + component files):
{render_files(files)}

{render_output_format(profile)}"""
