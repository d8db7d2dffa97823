"""
Configuration management for Knife Forge.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import yaml


GLOBAL_CONFIG_DIR = Path.home() / ".knife_forge"
GLOBAL_CONFIG_FILE = GLOBAL_CONFIG_DIR / "config.yaml"

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_MESH_MODEL = "google/shap-e"
DEFAULT_INFERENCE_URL = "https://api-inference.huggingface.co"
DEFAULT_PLACEHOLDER_URL = (
    "https://raw.githubusercontent.com/KhronosGroup/glTF-Sample-Models/"
    "master/2.0/Duck/glTF-Binary/Duck.glb"
)


@dataclass
class APIKeys:
    """API key configuration."""

    google: str = ""
    huggingface: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "APIKeys":
        return cls(
            google=data.get("google", ""),
            huggingface=data.get("huggingface", ""),
        )

    @classmethod
    def from_env(cls) -> "APIKeys":
        """Load API keys from environment variables."""
        return cls(
            google=os.getenv("GOOGLE_API_KEY", "") or os.getenv("API_KEY", ""),
            huggingface=os.getenv("HUGGINGFACE_API_KEY", "") or os.getenv("HF_TOKEN", ""),
        )

    def merge_env(self) -> "APIKeys":
        """Merge with environment variables (env takes precedence)."""
        env_keys = APIKeys.from_env()
        return APIKeys(
            google=env_keys.google or self.google,
            huggingface=env_keys.huggingface or self.huggingface,
        )


@dataclass
class Defaults:
    """Default settings."""

    image_model: str = DEFAULT_IMAGE_MODEL
    mesh_model: str = DEFAULT_MESH_MODEL
    inference_url: str = DEFAULT_INFERENCE_URL
    placeholder_url: str = DEFAULT_PLACEHOLDER_URL
    fallback_delay: float = 3.0  # seconds, simulated latency without a HF key
    product: str = "roblox_knife"  # download filename prefix
    output_dir: str = "."
    request_timeout: Optional[float] = None  # None = wait forever

    @classmethod
    def from_dict(cls, data: dict) -> "Defaults":
        return cls(
            image_model=data.get("image_model", DEFAULT_IMAGE_MODEL),
            mesh_model=data.get("mesh_model", DEFAULT_MESH_MODEL),
            inference_url=data.get("inference_url", DEFAULT_INFERENCE_URL),
            placeholder_url=data.get("placeholder_url", DEFAULT_PLACEHOLDER_URL),
            fallback_delay=float(data.get("fallback_delay", 3.0)),
            product=data.get("product", "roblox_knife"),
            output_dir=data.get("output_dir", "."),
            request_timeout=data.get("request_timeout"),
        )

    def to_dict(self) -> dict:
        return {
            "image_model": self.image_model,
            "mesh_model": self.mesh_model,
            "inference_url": self.inference_url,
            "placeholder_url": self.placeholder_url,
            "fallback_delay": self.fallback_delay,
            "product": self.product,
            "output_dir": self.output_dir,
            "request_timeout": self.request_timeout,
        }


@dataclass
class Config:
    """Complete configuration."""

    api_keys: APIKeys = field(default_factory=APIKeys)
    defaults: Defaults = field(default_factory=Defaults)

    @property
    def fallback_mode(self) -> bool:
        """True when no Hugging Face key is set and meshes come from the placeholder."""
        return not self.api_keys.huggingface

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from file and environment."""
        config_path = config_path or GLOBAL_CONFIG_FILE

        # Start with defaults
        config = cls()

        # Load from file if exists
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
                config.api_keys = APIKeys.from_dict(data.get("api_keys", {}))
                config.defaults = Defaults.from_dict(data.get("defaults", {}))

        # Merge environment variables (they take precedence)
        config.api_keys = config.api_keys.merge_env()

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to file."""
        config_path = config_path or GLOBAL_CONFIG_FILE
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "api_keys": {
                "google": self.api_keys.google,
                "huggingface": self.api_keys.huggingface,
            },
            "defaults": self.defaults.to_dict(),
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues.

        A missing Hugging Face key is not an issue: meshes fall back to the
        placeholder asset.
        """
        issues = []

        if not self.api_keys.google:
            issues.append("Google API key not configured (GOOGLE_API_KEY)")

        if self.defaults.fallback_delay < 0:
            issues.append("fallback_delay must not be negative")

        if not self.defaults.product:
            issues.append("product prefix must not be empty")

        return issues
