"""
Configuration settings for the LogicFlow engine.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""
    
    # Application
    APP_NAME: str = "LogicFlow"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    
    # Flow Engine
    MAX_FLOW_LENGTH: int = 32767  # Default step ceiling per run
    MAX_FLOW_HISTORY_SIZE: int = 32767  # Retained execution contexts
    
    # Persistence
    FLOW_DIRECTORY: str = "flows"
    FORMAT_VERSION: str = "1"
    LOAD_FLOWS_ON_STARTUP: bool = True
    SAVE_FLOWS_ON_SHUTDOWN: bool = False
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
