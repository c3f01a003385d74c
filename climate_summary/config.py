"""
Configuration for the climate summary tool
"""
from typing import Optional
from pydantic_settings import BaseSettings


class ClimateConfig(BaseSettings):
    """Climate summary configuration"""
    
    # Parsing limits
    max_line_length: int = 97  # Excludes the line terminator
    encoding: str = "utf-8"
    
    # Aggregation limits (None = unbounded)
    max_regions: Optional[int] = None
    
    # Output
    report_format: str = "text"
    log_level: str = "INFO"
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "CLIMATE_"
        case_sensitive = False


# Global config instance
_config: Optional[ClimateConfig] = None


def get_config() -> ClimateConfig:
    """Get or create global configuration instance."""
    global _config
    if _config is None:
        _config = ClimateConfig()
    return _config
