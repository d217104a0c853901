"""Hierarchy engine settings."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_hierarchy_yaml_source


class HierarchySettings(BaseSettings):
    """Settings for the closure-table engine.

    Environment variables use HIERARCHY_ prefix.
    Example: HIERARCHY_ROOT_NAME=catalog, HIERARCHY_SERIALIZE_MUTATIONS=false
    """

    root_name: str = Field(
        default="root",
        min_length=1,
        max_length=255,
        description="Name of the node seeded as the tree root at bootstrap.",
    )
    max_name_length: int = Field(
        default=255,
        ge=1,
        le=255,
        description="Longest accepted node name (bounded by the nodes.name column).",
    )
    serialize_mutations: bool = Field(
        default=True,
        description=(
            "Serialize add/delete/move so concurrent structural changes never "
            "observe each other's half-written closure rows."
        ),
    )
    advisory_lock_key: int = Field(
        default=7_204_118,
        description="PostgreSQL advisory lock key used to serialize mutations across processes.",
    )

    model_config = SettingsConfigDict(
        env_prefix="HIERARCHY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_hierarchy_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @field_validator("root_name")
    @classmethod
    def _strip_root_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("root_name must not be blank")
        return stripped
