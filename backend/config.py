"""
Configuration management for the job board agent relay.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Salesforce org (client credentials connected app)
    sf_domain: str = ""
    sf_client_id: str = ""
    sf_client_secret: str = ""
    sf_api_version: str = "v64.0"

    # Einstein agent API
    sf_api_host: str = "https://api.salesforce.com"
    sf_agent_id: str = ""
    agent_language: str = "en_US"
    agent_timezone: str = "America/Los_Angeles"

    # Flows resolving the application context
    candidate_details_flow_name: str = ""
    candidate_response_flow_name: str = ""

    # Messaging event router
    sf_chat_domain: str = ""
    sf_org_id: str = ""
    ca_bundle_path: str = ""

    # HTTP
    crm_timeout: float = 30.0
    token_skew_seconds: float = 60.0
    token_fallback_ttl_seconds: float = 0.0

    # Chat
    max_message_length: int = 2000
    clear_cookie_on_close_failure: bool = False

    # Web app
    environment: str = "development"
    session_secret_key: str = ""
    session_cookie_name: str = "chatSession"
    cors_origins: str = "http://localhost:3000"
    rate_limit_session: str = "10/minute"
    rate_limit_message: str = "30/minute"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
