"""The persistence contract the review pipeline depends on.

complens_store implements it with SQLite; tests can pass any object with
these methods. Keeping it a Protocol means complens_core never imports a
concrete store.
"""

from __future__ import annotations

from typing import Protocol

from complens_core.models import AdminPolicy, PackageInfo, ProviderConfig, ReviewResult, StatusTransition


class ReviewBackend(Protocol):
    def get_package(self, package_id: str) -> PackageInfo | None: ...

    def set_ai_review_status(self, package_id: str, status: str) -> None: ...

    def save_ai_review_result(self, package_id: str, result: ReviewResult) -> None: ...

    def get_admin_policy(self) -> AdminPolicy: ...

    def update_review_status(self, package_id: str, transition: StatusTransition) -> None: ...

    def get_active_provider(self) -> ProviderConfig | None: ...

    def get_active_prompt(self) -> str | None: ...
