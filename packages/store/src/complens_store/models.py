"""Records owned by the admin surface of the store.

Package and review records live in complens_core.models because the review
pipeline reads and writes them; these are only read by the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass

ADMIN_SETTING_KEYS = ("auto_approve_on_pass", "auto_reject_on_fail")

# Shown instead of a stored API key. A key containing the mask is never saved back.
KEY_MASK = "••••••••"


def is_masked(api_key: str | None) -> bool:
    return bool(api_key) and "••••" in api_key


@dataclass
class ProviderSetting:
    """One provider's stored settings, with the API key masked."""

    provider: str
    api_key: str | None  # KEY_MASK when a key is stored, else None
    model: str | None
    is_enabled: bool
    updated_at: str | None = None


@dataclass
class PromptVersion:
    id: int
    content: str
    is_active: bool
    is_default: bool
    created_at: str
    created_by: str | None = None
    notes: str | None = None
