"""Runtime configuration model for Graphload.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_OUTPUT_ROOT, VERTEX_DECODER_KEY, VERTEX_ENCODER_KEY


@dataclass(frozen=True)
class GraphloadConfig:
    """Validated runtime configuration.

    Attributes:
        output_root: Default root directory for bulk-load output.
        s3_region: Optional default AWS region for S3 reads.
        s3_profile: Optional AWS profile for boto3 session initialization.
        vertex_decoder: Optional default record decoder name.
        vertex_encoder: Optional default store encoder name.
    """

    output_root: Path
    s3_region: str | None
    s3_profile: str | None
    vertex_decoder: str | None = None
    vertex_encoder: str | None = None

    @classmethod
    def from_env(cls) -> "GraphloadConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.
        """
        output_root_value = os.getenv("GRAPHLOAD_OUTPUT_ROOT", str(DEFAULT_OUTPUT_ROOT))
        return cls(
            output_root=Path(output_root_value).expanduser().resolve(),
            s3_region=os.getenv("GRAPHLOAD_S3_REGION"),
            s3_profile=os.getenv("GRAPHLOAD_S3_PROFILE"),
            vertex_decoder=_optional_env("GRAPHLOAD_VERTEX_DECODER"),
            vertex_encoder=_optional_env("GRAPHLOAD_VERTEX_ENCODER"),
        )

    def strategy_settings(self) -> dict[str, str]:
        """Return strategy selection entries in resolver key form."""
        settings: dict[str, str] = {}
        if self.vertex_decoder:
            settings[VERTEX_DECODER_KEY] = self.vertex_decoder
        if self.vertex_encoder:
            settings[VERTEX_ENCODER_KEY] = self.vertex_encoder
        return settings


def _optional_env(name: str) -> str | None:
    """Read an environment value, treating blank as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()
