"""Environment-driven settings for where config state lives.

Each field maps to an environment variable named ``{ENV_PREFIX}_{FIELD}``
uppercased::

    CLICONF_HOME=/tmp/home          # replaces the user's home directory
    CLICONF_STATE_FOLDER=.mytool    # hidden state folder name
    CLICONF_PROJECT_MARKER=tool.json

Unset or empty variables fall back to the field defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_STATE_FOLDER = ".cliconf"
DEFAULT_PROJECT_MARKER = "cliconf-project.json"


class Settings(BaseModel):
    """Resolved locations for global and project-local config state."""

    model_config = ConfigDict(frozen=True)

    env_prefix: ClassVar[str] = "CLICONF"

    home: Path | None = None
    state_folder: str = DEFAULT_STATE_FOLDER
    project_marker: str = DEFAULT_PROJECT_MARKER

    @field_validator("state_folder", "project_marker")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from *environ* (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        raw_data: dict[str, Any] = {}
        for field_name in cls.model_fields:
            env_val = env.get(f"{cls.env_prefix}_{field_name}".upper())
            if env_val:
                raw_data[field_name] = env_val

        return cls.model_validate(raw_data)

    @property
    def home_dir(self) -> Path:
        return self.home if self.home is not None else Path.home()

    @property
    def global_state_dir(self) -> Path:
        return self.home_dir / self.state_folder
