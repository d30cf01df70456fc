"""Application settings using Pydantic BaseSettings for environment variable management."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Every field is optional. Missing API keys degrade the matching adapter to
    its fallback dataset with a warning rather than failing verification.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
        max_retries: Additional attempts after the first for transient failures
        backoff_base_seconds: Base delay for exponential backoff (base * 2^n)
        rate_limit_cooldown_seconds: Fixed sleep after the first HTTP 429
        default_timeout_seconds: Per-attempt wall-clock timeout
        slow_timeout_seconds: Per-attempt timeout for slow upstreams
        routing_profile: "base" or "extended" policy-area routing table
        dataset_cache_ttl_seconds: Memoization TTL for fetched datasets (0 disables)
        max_concurrent_adapters: Upper bound on concurrent adapter fetches
        scoring_weight_overrides: Per-adapter weight overrides (JSON in env)
    """

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )

    # Resilience
    max_retries: int = Field(
        default=3,
        description="Retries after the first attempt (1 + max_retries attempts total)"
    )
    backoff_base_seconds: float = Field(
        default=2.0,
        description="Exponential backoff base delay in seconds"
    )
    rate_limit_cooldown_seconds: float = Field(
        default=60.0,
        description="Cooldown applied once after an upstream HTTP 429"
    )
    default_timeout_seconds: float = Field(
        default=30.0,
        description="Per-attempt timeout for most upstreams"
    )
    slow_timeout_seconds: float = Field(
        default=45.0,
        description="Per-attempt timeout for slow upstreams (College Scorecard, USAspending)"
    )

    # Quotas (rolling windows)
    data_gov_daily_limit: int = Field(
        default=1000,
        description="Requests per rolling day shared across api.data.gov services"
    )
    congress_hourly_limit: int = Field(
        default=5000,
        description="Requests per rolling hour for Congress.gov"
    )
    fec_hourly_limit: int = Field(
        default=1000,
        description="Requests per rolling hour for OpenFEC (DEMO_KEY allows 30)"
    )
    census_daily_limit: int = Field(
        default=500,
        description="Requests per rolling day for the Census API without a key"
    )

    # Upstream base URLs
    census_base_url: str = Field(default="https://api.census.gov/data/2022/acs/acs5")
    eia_base_url: str = Field(default="https://api.eia.gov/v2")
    noaa_base_url: str = Field(default="https://www.ncdc.noaa.gov/cdo-web/api/v2")
    hud_base_url: str = Field(default="https://www.huduser.gov/hudapi/public")
    dot_base_url: str = Field(default="https://data.transportation.gov/resource")
    dot_bridge_resource: str = Field(
        default="nbi-state-summary",
        description="Socrata resource id of the NBI state bridge summary"
    )
    dot_transit_resource: str = Field(
        default="ntd-annual-ridership",
        description="Socrata resource id of the NTD annual ridership table"
    )
    fema_base_url: str = Field(default="https://www.fema.gov/api/open/v2")
    bjs_base_url: str = Field(default="https://api.ojp.gov/bjsdataset/v1")
    fec_base_url: str = Field(default="https://api.open.fec.gov/v1")
    congress_base_url: str = Field(default="https://api.congress.gov/v3")
    dept_ed_base_url: str = Field(default="https://api.data.gov/ed/collegescorecard/v1")
    va_facilities_base_url: str = Field(default="https://api.va.gov/services/va_facilities/v1")
    usaspending_base_url: str = Field(default="https://api.usaspending.gov/api/v2")
    federal_register_base_url: str = Field(default="https://www.federalregister.gov/api/v1")
    zip_lookup_base_url: str = Field(default="https://api.zippopotam.us/us")

    # Credentials
    census_api_key: str | None = Field(default=None, description="Census API key (optional)")
    eia_api_key: str | None = Field(default=None, description="EIA open data API key")
    noaa_token: str | None = Field(default=None, description="NOAA CDO web services token")
    hud_api_token: str | None = Field(default=None, description="HUD USER bearer token")
    data_gov_api_key: str | None = Field(
        default=None,
        description="api.data.gov key shared by College Scorecard and VA"
    )
    congress_api_key: str | None = Field(default=None, description="Congress.gov API key")
    fec_api_key: str = Field(
        default="DEMO_KEY",
        description="OpenFEC API key (DEMO_KEY is heavily rate limited)"
    )

    # Verification behaviour
    routing_profile: str = Field(
        default="base",
        description="Policy-area routing table: base or extended"
    )
    dataset_cache_ttl_seconds: float = Field(
        default=300.0,
        description="Memoize fetched datasets by adapter+geography (0 disables)"
    )
    max_concurrent_adapters: int = Field(
        default=8,
        description="Concurrent adapter fetches per verification"
    )
    max_concurrent_stories: int = Field(
        default=5,
        description="Concurrent story verifications in batch mode"
    )
    scoring_weight_overrides: dict[str, dict[str, int]] = Field(
        default_factory=dict,
        description='Weight overrides, e.g. {"housing": {"baseline": 65}}'
    )
    user_agent: str = Field(
        default="story_verifier/0.1.0",
        description="User-Agent header sent to upstream APIs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance - import this throughout the application
settings = Settings()
