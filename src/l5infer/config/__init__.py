"""Configuration package."""

from l5infer.config.settings import InferSettings, load_settings

__all__ = [
    "InferSettings",
    "load_settings",
]
