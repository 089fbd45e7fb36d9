"""Widget configuration with environment variable loading.

Selects the persistence and identity backends and locates the
completion relay.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

load_dotenv()


class WidgetConfig(BaseModel):
    """Configuration for the chat widget.

    Attributes:
        api_base_url: Base URL of the server hosting the relay.
        relay_url: Full URL of the completion relay.
        ui_base_url: Public URL of the chat page, used for the OAuth callback.
        supabase_url: Supabase project URL; empty selects local backends.
        supabase_anon_key: Public anon key of the Supabase project.
        oauth_provider: OAuth provider offered on the sign-in screen.
        store_backend: ``supabase`` or ``memory``.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
    )
    relay_url: str = Field(default_factory=lambda: os.getenv("RELAY_URL", ""))
    ui_base_url: str = Field(default_factory=lambda: os.getenv("UI_BASE_URL", ""))
    supabase_url: str = Field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_anon_key: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_ANON_KEY", ""),
    )
    oauth_provider: str = Field(
        default_factory=lambda: os.getenv("OAUTH_PROVIDER", "github"),
    )
    store_backend: str = Field(default_factory=lambda: os.getenv("STORE_BACKEND", ""))

    @model_validator(mode="after")
    def fill_defaults(self) -> "WidgetConfig":
        if not self.relay_url:
            self.relay_url = f"{self.api_base_url.rstrip('/')}/functions/v1/chat"
        if not self.ui_base_url:
            self.ui_base_url = self.api_base_url
        if not self.store_backend:
            self.store_backend = "supabase" if self.supabase_url else "memory"
        if self.store_backend not in ("supabase", "memory"):
            raise ValueError("STORE_BACKEND must be 'supabase' or 'memory'")
        if self.store_backend == "supabase" and not (
            self.supabase_url and self.supabase_anon_key
        ):
            raise ValueError(
                "Supabase backend requires SUPABASE_URL and SUPABASE_ANON_KEY in .env"
            )
        return self

    @property
    def uses_supabase(self) -> bool:
        return self.store_backend == "supabase"


def get_widget_config() -> WidgetConfig:
    """Create widget configuration from environment.

    Raises:
        ValueError: If the backend selection is inconsistent.
    """
    return WidgetConfig()
