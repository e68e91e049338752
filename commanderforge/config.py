from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CommanderForge"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/commanderforge"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_user_agent: str = "CommanderForge/1.0"
    scryfall_timeout: float = 30.0
    # Scryfall asks for 50-100ms between requests
    scryfall_request_delay: float = 0.1

    # Auto-build stage toggles
    enable_signature_cards: bool = True
    enable_external_fallbacks: bool = True
    enable_finisher_detection: bool = True
    enable_outlet_density: bool = True
    fetch_generic_staples: bool = False


settings = Settings()


# =============================================================================
# DECK SIZING
# =============================================================================

DECK_SIZE = 100

# Share of non-commander slots given to non-land cards (~38% lands)
NON_LAND_RATIO = 0.62

# Non-basic lands may take at most this share of the land slots
NON_BASIC_LAND_CEILING = 0.5

# =============================================================================
# SCRYFALL LIMITS
# =============================================================================

# Maximum identifiers accepted by /cards/collection per request
SCRYFALL_BATCH_LIMIT = 75
