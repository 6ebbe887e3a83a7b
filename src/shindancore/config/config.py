"""
Configuration management for shindancore using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shindancore.domain import ShindanDomain, resolve_domain

# --- Setup Logging ---
log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36 Edg/140.0.0.0"
)

# --- Nested Configuration Models ---


class HttpConfig(BaseModel):
    """HTTP transport configuration."""

    timeout: float = Field(default=10.0, gt=0, description="Per-request timeout in seconds.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent string for HTTP requests.")
    max_connections: int = Field(default=10, ge=1, description="Connection pool size of the session.")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates.")


class FeatureConfig(BaseModel):
    """Switches for the optional result representations."""

    segments: bool = Field(default=True, description="Enable parsing results into segments.")
    html: bool = Field(default=True, description="Enable standalone result HTML pages.")
    image_rendering: bool = Field(default=True, description="Enable rendering results to images.")


class RendererConfig(BaseModel):
    """Configuration for the headless browser renderer."""

    headless: bool = True
    viewport_width: int = Field(default=750, ge=1)
    viewport_height: int = Field(default=1000, ge=1)
    device_scale_factor: float = Field(default=1.0, gt=0)
    selector: Optional[str] = Field(
        default="#title_and_result",
        description="Element to capture. None captures the whole page.",
    )
    image_type: Literal["png", "jpeg"] = "png"
    timeout: float = Field(default=30.0, gt=0, description="Per-render timeout in seconds.")


class DomainProfile(BaseModel):
    """Markup selectors for one ShindanMaker domain.

    The service tends to change its markup per deployment, so these live in
    configuration rather than in the parsers.
    """

    title_selector: str = "#shindanTitle"
    title_attribute: str = "data-shindan_title"
    description_selector: str = "#shindanDescriptionDisplay"
    content_selectors: List[str] = Field(default_factory=lambda: ["#shindanResult", "#post_display"])
    result_markers: List[str] = Field(
        default_factory=lambda: ["#shindanResult", "#post_display", "#title_and_result"],
        description="Any of these present means the page is a result page.",
    )
    error_selectors: List[str] = Field(
        default_factory=lambda: [".alert-danger", ".invalid-feedback"],
        description="Where the service reports why a submission was refused.",
    )
    input_field: str = Field(default="user_input_value_1", description="Form field carrying the user input.")

    @field_validator("content_selectors", "result_markers")
    @classmethod
    def validate_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("at least one selector is required")
        return v


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: Optional[str] = Field(default=None, description="Path to log file. If None, logs to console.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: Union[str, Path, None]) -> Optional[str]:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    http: HttpConfig = Field(default_factory=HttpConfig)
    features: FeatureConfig = Field(default_factory=FeatureConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    domains: Dict[str, DomainProfile] = Field(
        default_factory=dict, description="Per-domain markup overrides keyed by domain name (jp, en, ...)."
    )

    model_config = SettingsConfigDict(env_prefix="SHINDAN_", env_nested_delimiter="__", case_sensitive=False)

    @field_validator("domains", mode="before")
    @classmethod
    def normalise_domain_keys(cls, v: Optional[Dict[str, object]]) -> Dict[str, object]:
        if not v:
            return {}
        return {resolve_domain(key).name.lower(): profile for key, profile in v.items()}

    def profile_for(self, domain: ShindanDomain) -> DomainProfile:
        return self.domains.get(domain.name.lower()) or DomainProfile()

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Optional[Path]:
    current_dir = Path.cwd()
    for path in (current_dir / "shindan.yaml", current_dir / "shindan.yml"):
        if path.exists():
            return path
    return None
