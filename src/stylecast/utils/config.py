"""
Configuration Management

Centralized configuration system using Pydantic settings with
environment variable support and validation.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class PredictionSettings(BaseSettings):
    """Prediction service endpoint and polling configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STYLECAST_PREDICTION_", env_file=".env", extra="ignore", frozen=True
    )

    base_url: str = Field(
        default="http://localhost:3000/api",
        description="Collaborator endpoint that proxies to the inference provider"
    )

    submit_path: str = Field(default="/replicate")

    status_path: str = Field(default="/check-prediction")

    # Poll the job's own urls.get handle instead of the fixed status endpoint
    use_status_url: bool = Field(default=False)

    poll_interval: float = Field(default=2.0, ge=0)

    max_attempts: int = Field(default=90, ge=1, le=1000)

    max_consecutive_poll_errors: int = Field(default=5, ge=1)

    progress_base: float = Field(default=5.0, ge=0)

    progress_rate: float = Field(default=1.0, ge=0)

    progress_cap: float = Field(default=95.0, gt=0, lt=100)

    request_timeout: float = Field(default=30.0, gt=0)

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip('/')


class GenerationSettings(BaseSettings):
    """Fixed generation parameters sent with every job."""

    model_config = SettingsConfigDict(
        env_prefix="STYLECAST_GENERATION_", env_file=".env", extra="ignore", frozen=True
    )

    inference_steps: int = Field(default=28, ge=1)

    guidance_scale: float = Field(default=3.5, ge=0)

    output_format: str = Field(default="jpg")

    output_quality: int = Field(default=90, ge=1, le=100)

    conditioning_strength: float = Field(default=0.5, ge=0, le=1)

    @field_validator('output_format')
    @classmethod
    def validate_output_format(cls, v):
        v = v.lower()
        if v not in ['jpg', 'png']:
            raise ValueError("Output format must be jpg or png")
        return v

    def as_payload(self) -> dict:
        return {
            "num_inference_steps": self.inference_steps,
            "guidance_scale": self.guidance_scale,
            "output_format": self.output_format,
            "output_quality": self.output_quality,
            "control_strength": self.conditioning_strength,
        }


class ProcessingSettings(BaseSettings):
    """Image preprocessing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STYLECAST_PROCESSING_", env_file=".env", extra="ignore", frozen=True
    )

    max_dimension: int = Field(default=1024, ge=1)

    jpeg_quality: int = Field(default=95, ge=1, le=100)

    result_dir: Optional[str] = Field(
        default=None,
        description="Directory for local result files (system temp dir when unset)"
    )


class FallbackSettings(BaseSettings):
    """Simulated result configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STYLECAST_FALLBACK_", env_file=".env", extra="ignore", frozen=True
    )

    step: int = Field(default=10, ge=1, le=100)

    tick_interval: float = Field(default=0.2, ge=0)


class MonitoringSettings(BaseSettings):
    """Monitoring and observability configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STYLECAST_MONITORING_", env_file=".env", extra="ignore", frozen=True
    )

    log_level: str = Field(default="INFO")

    log_format: str = Field(default="json")

    sentry_dsn: Optional[str] = Field(default=None)

    prometheus_port: int = Field(default=9090)

    enable_metrics: bool = Field(default=False)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ['json', 'console']:
            raise ValueError("Log format must be json or console")
        return v.lower()


class AppSettings(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STYLECAST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    app_name: str = Field(default="Stylecast")

    app_version: str = Field(default="1.0.0")

    # Nested settings
    prediction: PredictionSettings = Field(default_factory=PredictionSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    fallback: FallbackSettings = Field(default_factory=FallbackSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get application settings (singleton pattern)."""
    global _settings

    if _settings is None:
        _settings = AppSettings()

    return _settings


def reload_settings() -> AppSettings:
    """Reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings


# Configuration validation
def validate_config(settings: AppSettings) -> List[str]:
    """Validate configuration and return list of warnings."""

    warnings = []

    prediction = settings.prediction
    if prediction.poll_interval < 1.0:
        warnings.append("Poll interval below 1s may hit provider rate limits")
    elif prediction.poll_interval > 2.0:
        warnings.append("Poll interval above 2s slows down result delivery")

    if not 60 <= prediction.max_attempts <= 90:
        warnings.append(
            f"Attempt budget of {prediction.max_attempts} is outside the usual 60-90 range"
        )

    if prediction.progress_base + prediction.progress_rate * prediction.max_attempts < prediction.progress_cap:
        warnings.append("Progress will never reach its cap within the attempt budget")

    if not 90 <= settings.processing.jpeg_quality <= 95:
        warnings.append("JPEG quality outside 90-95 trades payload size against fidelity")

    if not prediction.base_url.startswith(("http://", "https://")):
        warnings.append("Prediction base URL should be an http(s) URL")

    return warnings
