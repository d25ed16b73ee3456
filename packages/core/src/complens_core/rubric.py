"""Review profile: the rubric plus the repository layout rules it is checked against.

Everything here is static configuration. It is bundled into one frozen
ReviewProfile that is handed to the pipeline, so a test or a team can swap in
a smaller rubric or a different layout model without touching pipeline code.

Rubric order is part of the model protocol: the prompt lists criteria in this
order, and the verdict engine reads the model's answers back by position.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath


@dataclass(frozen=True)
class ReviewCriterion:
    name: str
    check: str  # what the grader should look for
    critical: bool = False


@dataclass(frozen=True)
class DirectoryRule:
    """Sibling directories to search when the definition file sits under ``prefix``.

    ``prefix == ""`` matches any path and must come last. A ``None`` entry in
    ``dirs`` stands for the definition file's own directory.
    """

    prefix: str
    dirs: tuple[str | None, ...]


CONVEX_CRITERIA = (
    ReviewCriterion(
        "Has convex.config.ts with defineComponent()",
        "Check for convex.config.ts in root with defineComponent() export",
        critical=True,
    ),
    ReviewCriterion(
        "Has component functions",
        "Check for TypeScript files with queries, mutations, or actions in component/ or root",
        critical=True,
    ),
    ReviewCriterion(
        "Functions use new syntax",
        "Check for query({, mutation({, action({ with args/handler",
        critical=True,
    ),
    ReviewCriterion(
        "All functions have returns: validator",
        "Check handler signatures include return validators",
        critical=True,
    ),
    ReviewCriterion(
        "Uses v.null() for void returns",
        "Functions returning nothing use v.null() not undefined",
        critical=True,
    ),
    ReviewCriterion(
        "Indexes follow naming convention",
        "If schema exists, index names match by_field1_and_field2 pattern",
    ),
    ReviewCriterion(
        "Uses withIndex() not filter()",
        "Queries use indexes instead of filter",
    ),
    ReviewCriterion(
        "Internal functions use internal*",
        "Sensitive functions use internalQuery, etc.",
    ),
    ReviewCriterion(
        "Has TypeScript with proper types",
        'Uses Id<"table"> types, proper validators',
    ),
    ReviewCriterion(
        "Uses token-based authorization (when applicable)",
        "If component needs auth, uses token-based pattern like Presence component "
        "(heartbeat returns tokens, methods require tokens). Not all components need auth.",
    ),
)

# Deepest, most specific layouts first; root-level last.
CONVEX_CANDIDATE_PATHS = (
    "convex/src/component/convex.config.ts",
    "convex/component/convex.config.ts",
    "convex/convex.config.ts",
    "src/component/convex.config.ts",
    "src/convex.config.ts",
    "convex.config.ts",
    "packages/component/convex.config.ts",
    "lib/convex.config.ts",
)

# First matching prefix wins, so the more specific prefixes come first.
CONVEX_DIRECTORY_RULES = (
    DirectoryRule("convex/src/component/", ("convex/src/component",)),
    DirectoryRule("convex/component/", ("convex/component",)),
    DirectoryRule("convex/", ("convex/src/component", "convex/component", "convex")),
    DirectoryRule("src/component/", ("src/component",)),
    DirectoryRule("src/", ("src/component", "src")),
    DirectoryRule("packages/", (None,)),
    DirectoryRule("lib/", ("lib",)),
    DirectoryRule("", ("component", "")),
)

CONVEX_DOCS = (
    ("Authoring Components", "https://docs.convex.dev/components/authoring"),
    ("Understanding Components", "https://docs.convex.dev/components/understanding"),
    ("Using Components", "https://docs.convex.dev/components/using"),
    ("Function Syntax", "https://docs.convex.dev/functions"),
    ("Validation", "https://docs.convex.dev/functions/validation"),
    ("Actions", "https://docs.convex.dev/functions/actions"),
    ("Best Practices", "https://docs.convex.dev/understanding/best-practices"),
)

CONVEX_KEY_REQUIREMENTS = (
    "Components must have convex.config.ts with defineComponent() export",
    "Component structure: convex.config.ts at root or src/component/, with functions in component/ directory",
    "Functions must use new syntax: query({ args: {}, returns: v.null(), handler: async (ctx, args) => {} })",
    "All functions MUST have explicit 'returns' validator (use v.null() for functions that don't return values)",
    "Functions returning nothing MUST use v.null() as the return validator, not undefined",
    "Internal functions should use internalQuery, internalMutation, internalAction",
    "Indexes should follow naming convention: by_field1_and_field2",
    "If component needs authorization, use token-based pattern (like Presence component): methods return "
    "tokens, subsequent calls require tokens. Note: Not all components need authorization.",
)

CONVEX_EXPLAINER = """WHAT IS A CONVEX COMPONENT:
A Convex component is an npm package that:
- Has convex.config.ts with defineComponent() at root, src/, or src/component/
- Contains Convex functions (queries, mutations, actions) in the component
- Is installed by other Convex apps via npm install
- Exports functionality through the component definition
- Can include schema, client code, and HTTP endpoints"""


@dataclass(frozen=True)
class ReviewProfile:
    criteria: tuple[ReviewCriterion, ...] = CONVEX_CRITERIA
    definition_file: str = "convex.config.ts"
    candidate_paths: tuple[str, ...] = CONVEX_CANDIDATE_PATHS
    directory_rules: tuple[DirectoryRule, ...] = CONVEX_DIRECTORY_RULES
    source_extensions: tuple[str, ...] = (".ts",)
    docs: tuple[tuple[str, str], ...] = CONVEX_DOCS
    key_requirements: tuple[str, ...] = CONVEX_KEY_REQUIREMENTS
    explainer: str = CONVEX_EXPLAINER
    subject: str = "Convex component"
    # Per-criterion hint appended to the JSON template, keyed by criterion name.
    template_hints: dict[str, str] = field(
        default_factory=lambda: {
            "Uses token-based authorization (when applicable)": (
                "Your note - if component doesn't need auth, mark as PASS with note explaining why auth isn't needed"
            ),
        },
        hash=False,
        compare=False,
    )

    def sibling_directories(self, definition_path: str) -> list[str]:
        """Return the directories to search for source files, in priority order."""
        own_dir = str(PurePosixPath(definition_path).parent)
        if own_dir == ".":
            own_dir = ""
        for rule in self.directory_rules:
            if definition_path.startswith(rule.prefix):
                return [own_dir if d is None else d for d in rule.dirs]
        return [own_dir]

    def is_source_file(self, name: str) -> bool:
        return name != self.definition_file and any(name.endswith(ext) for ext in self.source_extensions)


DEFAULT_PROFILE = ReviewProfile()
