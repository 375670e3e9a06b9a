"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "uasim"
    debug: bool = False
    log_level: str = "INFO"

    # Software identification
    manufacturer: str = "uasim"
    software_model: str = "SampleServer-python"
    software_revision: str = "v1.0.0"

    # Users & history
    user_file: str = "user.json"
    historian_capacity: int = 100

    # Severity event counter (MySeverity / myEventNotifier)
    event_interval_seconds: float = 60.0
    severity_start: float = 100.0
    severity_step: float = 50.0
    severity_floor: float = 100.0
    severity_ceiling: float = 1000.0

    # Bidirectional ramp (MyVar, alarm input)
    ramp_interval_seconds: float = 1.0
    ramp_start: float = 25.0
    ramp_step: float = 1.0
    ramp_floor: float = -25.0
    ramp_ceiling: float = 60.0

    # Limit alarm on MyVar
    alarm_low_low: float = -5.0
    alarm_low: float = 20.0
    alarm_high: float = 40.0
    alarm_high_high: float = 50.0

    # Condition oscillation (MyCondition)
    condition_interval_seconds: float = 15.0
    condition_good_severity: int = 150
    condition_bad_severity: int = 800

    # Machine tool
    state_toggle_interval_seconds: float = 10.0
    override_interval_seconds: float = 1.0
    override_start: float = 50.0
    override_step: float = 5.0
    override_floor: float = 50.0
    override_ceiling: float = 120.0

    model_config = {"env_prefix": "UASIM_"}


settings = Settings()
