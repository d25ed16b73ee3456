"""Tests for the grading prompt."""

import json

from complens_core.models import RepositoryFile
from complens_core.prompt import build_prompt, default_instructions, render_criteria, render_output_format
from complens_core.rubric import DEFAULT_PROFILE, ReviewCriterion, ReviewProfile

PACKAGE = {"name": "@acme/rate-limiter", "version": "1.2.0"}
FILES = [
    RepositoryFile(path="src/component/convex.config.ts", content="export default defineComponent('rl');"),
    RepositoryFile(path="src/component/lib.ts", content="export const check = query({});"),
]


class TestBuildPrompt:
    def test_contains_package_identity(self):
        prompt = build_prompt(DEFAULT_PROFILE, PACKAGE, FILES)
        assert "PACKAGE: @acme/rate-limiter" in prompt
        assert "VERSION: 1.2.0" in prompt

    def test_files_rendered_in_order_with_fences(self):
        prompt = build_prompt(DEFAULT_PROFILE, PACKAGE, FILES)
        first = prompt.index("File: src/component/convex.config.ts\n```typescript\n")
        second = prompt.index("File: src/component/lib.ts\n```typescript\n")
        assert first < second
        assert "export const check = query({});" in prompt

    def test_every_criterion_listed_in_rubric_order(self):
        prompt = build_prompt(DEFAULT_PROFILE, PACKAGE, FILES)
        positions = [prompt.index(f". {c.name}: ") for c in DEFAULT_PROFILE.criteria]
        assert positions == sorted(positions)

    def test_section_order(self):
        prompt = build_prompt(DEFAULT_PROFILE, PACKAGE, FILES)
        markers = [
            "OFFICIAL CONVEX COMPONENT DOCUMENTATION REFERENCES:",
            "WHAT IS A CONVEX COMPONENT:",
            "PACKAGE:",
            "CRITERIA TO CHECK",
            "SOURCE CODE",
            "Respond in this exact JSON format:",
        ]
        positions = [prompt.index(m) for m in markers]
        assert positions == sorted(positions)

    def test_custom_instructions_replace_default_framing(self):
        prompt = build_prompt(DEFAULT_PROFILE, PACKAGE, FILES, instructions="Be brutally honest.")
        assert prompt.startswith("Be brutally honest.")
        assert "WHAT IS A CONVEX COMPONENT:" not in prompt
        # Rubric and output format are generated regardless.
        assert "CRITERIA TO CHECK" in prompt
        assert "Respond in this exact JSON format:" in prompt

    def test_blank_instructions_fall_back_to_default(self):
        prompt = build_prompt(DEFAULT_PROFILE, PACKAGE, FILES, instructions="   \n")
        assert prompt.startswith(default_instructions(DEFAULT_PROFILE))


class TestRenderCriteria:
    def test_marks_critical_criteria(self):
        lines = render_criteria(DEFAULT_PROFILE).splitlines()
        assert len(lines) == len(DEFAULT_PROFILE.criteria)
        for line, criterion in zip(lines, DEFAULT_PROFILE.criteria):
            assert line.endswith("(CRITICAL)") == criterion.critical

    def test_numbering_starts_at_one(self):
        assert render_criteria(DEFAULT_PROFILE).startswith("1. Has convex.config.ts with defineComponent()")


class TestRenderOutputFormat:
    def test_template_names_every_criterion(self):
        template = render_output_format(DEFAULT_PROFILE)
        for c in DEFAULT_PROFILE.criteria:
            assert json.dumps(c.name) in template

    def test_token_auth_hint_included(self):
        template = render_output_format(DEFAULT_PROFILE)
        assert "if component doesn't need auth, mark as PASS" in template

    def test_follows_a_custom_profile(self):
        profile = ReviewProfile(
            criteria=(ReviewCriterion('Has "quoted" name', "look", critical=True),),
            docs=(("Guide", "https://example.com/guide"),),
        )
        template = render_output_format(profile)
        assert json.dumps('Has "quoted" name') in template
        assert "https://example.com/guide" in template
        assert template.count('"passed": true/false') == 1
