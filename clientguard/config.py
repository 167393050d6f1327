"""
Application configuration management.
"""

from pydantic_settings import BaseSettings
from typing import Dict, Optional


class Settings(BaseSettings):
    """Client guard settings loaded from environment variables."""
    
    # Environment
    environment: str = "development"
    enable_error_tracking: bool = False
    
    # API (only referenced by the content security policy)
    api_base_url: str = "http://localhost:5000/api/v1"
    
    # Application
    app_name: str = "CareNest"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    
    # Credential storage
    token_storage_key: str = "carenest_auth"
    credential_store_url: Optional[str] = None  # Durable tier uses Redis when set
    
    # Rate limiting
    login_rate_limit_max_attempts: int = 5
    login_rate_limit_window_seconds: float = 15 * 60
    api_rate_limit_max_attempts: int = 60
    api_rate_limit_window_seconds: float = 60
    
    # Diagnostics
    error_buffer_size: int = 50
    
    class Config:
        env_file = ".env"
        case_sensitive = False
    
    @property
    def is_production(self) -> bool:
        """True when running a production build."""
        return self.environment == "production"
    
    @property
    def is_development(self) -> bool:
        """True for every non-production build."""
        return not self.is_production
    
    def build_csp_header(self) -> Dict[str, str]:
        """
        Build the Content-Security-Policy header for the configured API.
        
        Returns:
            Header mapping with a single Content-Security-Policy entry
        """
        directives = [
            "default-src 'self'",
            "script-src 'self' 'unsafe-inline' 'unsafe-eval'",
            "style-src 'self' 'unsafe-inline'",
            "img-src 'self' data: https:",
            "font-src 'self' data:",
            f"connect-src 'self' {self.api_base_url}",
            "frame-ancestors 'none'",
        ]
        return {"Content-Security-Policy": "; ".join(directives)}


# Global settings instance
settings = Settings()
