"""
Core configuration module
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Engine settings, overridable through environment variables or .env"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Device transport
    adb_path: str = Field(default="adb")
    adb_timeout_sec: float = Field(default=10.0)
    screencap_timeout_sec: float = Field(default=15.0)
    # Command used to pull the UI hierarchy off the device; output must contain <hierarchy>
    xml_dump_command: str = Field(default="exec-out uiautomator dump /dev/tty")
    xml_dump_timeout_sec: float = Field(default=30.0)

    # Action playback
    command_timeout_sec: int = Field(default=30)
    transport_retry_count: int = Field(default=1)
    default_delay_after_action_ms: int = Field(default=0)
    output_dir: str = Field(default="./output")

    # OCR
    paddle_ocr_lang: str = Field(default="en")
    ocr_model_dir: str = Field(default="./ocr_models")
    ocr_min_confidence: float = Field(default=0.6)
    ocr_timeout_sec: float = Field(default=20.0)

    # Thread pools (0 = auto)
    compute_thread_pool_size: int = Field(default=0)

    # Logging
    log_level: str = Field(default="INFO")
    log_path: str = Field(default="./logs")
    log_retention_days: int = Field(default=3)
    log_console_enabled: bool = Field(default=True)
    log_rotation: str = Field(default="00:00")


# Global settings instance
settings = Settings()
