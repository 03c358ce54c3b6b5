"""Configuration schema for datemirror."""

from __future__ import annotations

from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

UNSET_PROPERTY = "DEFAULT"
DEFAULT_DATE_FORMAT = "YYYY-MM-DD"


class Settings(BaseModel):
    """Settings for keeping filenames and a date property in sync."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    date_property: str = Field(default=UNSET_PROPERTY, alias="dateProperty")
    date_format: str = Field(default=DEFAULT_DATE_FORMAT, alias="dateFormat")
    debounce_seconds: float = Field(default=0.5, ge=0)
    extensions: list[str] = Field(default_factory=lambda: [".md"])
    fallback_date_formats: list[str] = Field(
        default_factory=lambda: [
            "%Y-%m-%d",  # 2024-01-15
            "%Y/%m/%d",  # 2024/01/15
            "%Y%m%d",  # 20240115
            "%d.%m.%Y",  # 15.01.2024
            "%B %d, %Y",  # January 15, 2024
            "%b %d, %Y",  # Jan 15, 2024
        ]
    )

    @property
    def is_configured(self) -> bool:
        """Whether a real frontmatter property has been chosen."""
        return bool(self.date_property) and self.date_property != UNSET_PROPERTY

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary for YAML serialization."""
        return {
            "date_property": self.date_property,
            "date_format": self.date_format,
            "debounce_seconds": self.debounce_seconds,
            "extensions": self.extensions,
            "fallback_date_formats": self.fallback_date_formats,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a dictionary, merged over the defaults.

        Unknown keys are dropped so older or hand-edited files still load.
        """
        known = set(cls.model_fields) | {
            field.alias for field in cls.model_fields.values() if field.alias
        }
        return cls.model_validate({k: v for k, v in data.items() if k in known})

    def to_yaml(self) -> str:
        """Convert settings to YAML string."""
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)
