"""Abstract store interface.

BaseStore satisfies complens_core.backend.ReviewBackend, so the review
pipeline runs against any implementation, and adds the admin operations the
CLI needs: submissions, approval policy, provider settings and prompt
versions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from complens_core.models import AdminPolicy, PackageInfo, ProviderConfig, ReviewResult, StatusTransition
    from complens_store.models import PromptVersion, ProviderSetting


class BaseStore(ABC):
    """Pluggable persistence layer for submissions and review state.

    Operations on a package id that does not exist raise KeyError, except
    get_package, which returns None.
    """

    # --- packages -------------------------------------------------------

    @abstractmethod
    def add_package(self, name: str, version: str, repository_url: str | None = None) -> str:
        """Record a submission and return its id."""

    @abstractmethod
    def get_package(self, package_id: str) -> PackageInfo | None: ...

    @abstractmethod
    def get_package_by_name(self, name: str) -> PackageInfo | None: ...

    @abstractmethod
    def list_packages(self, ai_status: str | None = None) -> list[PackageInfo]:
        """Return packages, newest first, optionally filtered by AI review status."""

    # --- AI review state ------------------------------------------------

    @abstractmethod
    def set_ai_review_status(self, package_id: str, status: str) -> None: ...

    @abstractmethod
    def save_ai_review_result(self, package_id: str, result: ReviewResult) -> None:
        """Persist status, summary, criteria, error and timestamp in one write."""

    @abstractmethod
    def update_review_status(self, package_id: str, transition: StatusTransition) -> None: ...

    # --- admin policy ---------------------------------------------------

    @abstractmethod
    def get_admin_policy(self) -> AdminPolicy: ...

    @abstractmethod
    def update_admin_setting(self, key: str, value: bool) -> None:
        """Set one policy flag. Raises ValueError for an unknown key."""

    # --- provider settings ----------------------------------------------

    @abstractmethod
    def update_provider_settings(
        self,
        provider: str,
        api_key: str | None = None,
        model: str | None = None,
        is_enabled: bool = False,
    ) -> None:
        """Upsert one provider. Enabling it disables every other provider."""

    @abstractmethod
    def get_provider_settings(self) -> tuple[list[ProviderSetting], str | None]:
        """Return masked settings for every known provider and the active provider name."""

    @abstractmethod
    def clear_provider_settings(self, provider: str) -> None: ...

    @abstractmethod
    def get_active_provider(self) -> ProviderConfig | None:
        """Return the first enabled provider with both key and model, or None."""

    # --- prompt versions ------------------------------------------------

    @abstractmethod
    def save_prompt_version(self, content: str, notes: str | None = None, created_by: str | None = None) -> int:
        """Store a custom prompt and make it the active one."""

    @abstractmethod
    def activate_prompt_version(self, version_id: int) -> None: ...

    @abstractmethod
    def reset_to_default_prompt(self, default_content: str) -> int:
        """Make the built-in prompt active again, recording it the first time."""

    @abstractmethod
    def get_active_prompt(self) -> str | None:
        """Return the active custom prompt, or None when the built-in one applies."""

    @abstractmethod
    def list_prompt_versions(self, limit: int = 50) -> list[PromptVersion]: ...

    def close(self) -> None:
        """Release any resources held by the store.

        Default is a no-op so callers can always call close() safely.
        """
