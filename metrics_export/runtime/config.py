"""Export configuration model."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from metrics_export.core.errors import InvalidConfigError
from metrics_export.export.orchestrator import DEFAULT_LABEL

DEFAULT_INTERVAL = "1 month"


class ExportConfig(BaseModel):
    """Backend selection and defaults for a metrics export run."""

    backend: Literal["cloudwatch", "oci"] = "cloudwatch"

    # Provider connection
    region: str | None = None
    profile: str | None = None
    oci_auth_mode: Literal["instance_principal", "api_key"] = "instance_principal"
    oci_config_file: str | None = None
    oci_profile: str = "DEFAULT"

    # Export defaults (CLI flags take precedence)
    label: str = Field(default=DEFAULT_LABEL, min_length=1)
    interval: str = Field(default=DEFAULT_INTERVAL, min_length=1)
    scratch_dir: Path | None = None

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, config_obj: dict[str, Any]) -> ExportConfig:
        """Create an ExportConfig from a JSON-compatible object."""
        try:
            return cls.model_validate(config_obj)
        except ValidationError as exc:
            raise InvalidConfigError(f"Invalid export config: {exc}") from exc

    @classmethod
    def from_file(cls, path: str | Path) -> ExportConfig:
        config_path = Path(path)
        try:
            raw = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise InvalidConfigError(f'Config file "{path}" cannot be loaded: {exc}') from exc

        if not isinstance(raw, dict):
            raise InvalidConfigError(f'Config file "{path}" must hold a JSON object')

        return cls.from_json_obj(raw)

    @model_validator(mode="after")
    def validate_consistency(self) -> ExportConfig:
        """api_key auth cannot work without an OCI config file."""
        if (
            self.backend == "oci"
            and self.oci_auth_mode == "api_key"
            and self.oci_config_file is None
        ):
            raise ValueError("oci_config_file is required for api_key auth")
        return self

    def with_overrides(self, **overrides: Any) -> ExportConfig:
        """Return a copy with every non-None override applied and re-validated."""
        data = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return type(self).from_json_obj(data)
