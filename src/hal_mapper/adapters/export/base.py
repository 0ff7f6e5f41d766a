"""Common plumbing for the export formats.

Every exporter renders a (Configuration, application signals) pair into a
single artifact. Exporters never mutate their input and never fail on
inconsistent data; unresolved references render as placeholders.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import TYPE_CHECKING, ClassVar

import structlog

from hal_mapper import __version__

if TYPE_CHECKING:
    from pathlib import Path

    from hal_mapper.domain.model.hardware import ApplicationSignal
    from hal_mapper.domain.model.mapping import Configuration

logger = structlog.get_logger(__name__)

GENERATOR = "hal-mapper"
FIXED_TIMESTAMP = "2000-01-01T00:00:00Z"


class Exporter(ABC):
    """Base class for all export formats.

    Subclasses implement ``render`` and declare the file extension and the
    format key used by the CLI.
    """

    format_name: ClassVar[str]
    extension: ClassVar[str]
    binary: ClassVar[bool] = False
    filename_suffix: ClassVar[str] = ""

    def __init__(
        self,
        config: Configuration,
        signals: list[ApplicationSignal],
        *,
        deterministic: bool = False,
        project_name: str | None = None,
    ) -> None:
        """Initialize the exporter.

        Args:
            config: Configuration to export
            signals: Application signal catalog
            deterministic: If True, use a fixed timestamp for reproducibility
            project_name: Display name overriding the configuration name
        """
        self._config = config
        self._signals = list(signals)
        self._signals_by_id = {s.id: s for s in self._signals}
        self._deterministic = deterministic
        self._project_name = project_name or config.name or "HAL"

    @property
    def project_name(self) -> str:
        return self._project_name

    @abstractmethod
    def render(self) -> str | bytes:
        """Render the artifact in memory."""

    def generate(self, output_path: Path | None = None) -> str | bytes:
        """Render the artifact and optionally write it to disk.

        Args:
            output_path: Optional path to write the artifact

        Returns:
            The rendered artifact (text, or bytes for binary formats)
        """
        logger.info(
            "Generating export",
            format=self.format_name,
            config=self._config.name,
            mappings=len(self._config.mappings),
        )
        content = self.render()

        if output_path:
            if isinstance(content, bytes):
                output_path.write_bytes(content)
            else:
                output_path.write_text(content, encoding="utf-8")
            logger.info("Export written", format=self.format_name, path=str(output_path))

        return content

    def default_filename(self) -> str:
        """File name derived from the project name and version."""
        stem = re.sub(r"\s+", "_", self._project_name)
        return f"{stem}{self.filename_suffix}_v{self._config.version}.{self.extension}"

    def _timestamp(self) -> str:
        """ISO-8601 UTC timestamp, fixed in deterministic mode."""
        if self._deterministic:
            return FIXED_TIMESTAMP
        return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    @staticmethod
    def _generator() -> str:
        return f"{GENERATOR} {__version__}"
