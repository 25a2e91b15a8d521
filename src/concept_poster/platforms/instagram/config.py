"""Instagram platform configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ...constants import GRAPH_API_VERSION
from ..base import PlatformConfig

if TYPE_CHECKING:
    from ...concepts import ConceptConfig, InstagramAccount
    from ...config import Settings


@dataclass
class InstagramConfig(PlatformConfig):
    """Instagram account selected by a concept.

    The concept stores only the Instagram business account id
    (apiKeys.instagram). The page access token comes from the shared
    instagram_accounts.json in the root folder:

        [
          {"id": "17841400000000000", "page_access_token": "EAAG...", "username": "mybrand"}
        ]
    """

    platform: str = "instagram"
    account_id: str = ""
    access_token: str = ""
    username: Optional[str] = None
    graph_api_version: str = GRAPH_API_VERSION
    share_to_feed: bool = True

    @classmethod
    def from_concept(
        cls,
        concept: "ConceptConfig",
        settings: "Settings",
        accounts: Iterable["InstagramAccount"] = (),
        **context: Any,
    ) -> "InstagramConfig":
        account_id = (concept.api_keys.instagram or "").strip()
        match = next((a for a in accounts if a.id == account_id), None) if account_id else None
        return cls(
            enabled=bool(concept.platforms.get("Instagram", True)),
            account_id=account_id,
            access_token=match.page_access_token if match else "",
            username=match.username if match else None,
            graph_api_version=settings.graph_api_version,
        )

    def validate(self) -> tuple[bool, str]:
        if not self.account_id:
            return False, "Missing Instagram account id (apiKeys.instagram)"
        if not self.access_token:
            return False, f"No page access token for Instagram account {self.account_id}"
        return True, "OK"
