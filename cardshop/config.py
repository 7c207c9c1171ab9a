from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Card Shop"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/cardshop"

    cors_origins: list[str] = ["*"]

    # Catalog paging
    default_page_size: int = 20
    max_page_size: int = 100

    # Order numbers are time + random; a unique-constraint hit is retried
    order_number_attempts: int = 3

    # Caller identity is asserted by the auth proxy in front of the API
    user_id_header: str = "X-User-Id"
    user_email_header: str = "X-User-Email"
    user_name_header: str = "X-User-Name"
    user_role_header: str = "X-User-Role"


settings = Settings()


# =============================================================================
# CATALOG ORDERING
# =============================================================================

# Release order of the sets carried by the shop. Sets not listed sort last.
SET_ORDER: tuple[str, ...] = (
    "Base Set",
    "Jungle",
    "Fossil",
    "Base Set 2",
    "Team Rocket",
)
