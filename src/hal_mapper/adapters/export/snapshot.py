"""Lossless JSON snapshot of a configuration and its signal catalog."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from hal_mapper.adapters.export.base import Exporter
from hal_mapper.config.loader import ConfigurationError, format_validation_errors
from hal_mapper.config.schema import ApplicationSignalModel, ConfigurationModel, SnapshotFile

if TYPE_CHECKING:
    from hal_mapper.domain.model.hardware import ApplicationSignal
    from hal_mapper.domain.model.mapping import Configuration

logger = structlog.get_logger(__name__)


class JsonSnapshotExporter(Exporter):
    """Renders ``{exported, generator, config, appSignals}`` as indented JSON."""

    format_name = "json"
    extension = "json"

    def render(self) -> str:
        snapshot = SnapshotFile.model_construct(
            exported=self._timestamp(),
            generator=self._generator(),
            config=ConfigurationModel.from_domain(self._config),
            app_signals=[ApplicationSignalModel.from_domain(s) for s in self._signals],
        )
        data = snapshot.model_dump(mode="json", by_alias=True)
        return json.dumps(data, indent=2, ensure_ascii=False)


def parse_snapshot(text: str) -> tuple[Configuration, list[ApplicationSignal]]:
    """Restore a configuration and signal catalog from snapshot JSON.

    Args:
        text: JSON produced by ``JsonSnapshotExporter``

    Returns:
        (configuration, application signals)

    Raises:
        ConfigurationError: If the document is not a valid snapshot
    """
    try:
        snapshot = SnapshotFile.model_validate_json(text)
    except ValidationError as e:
        details, errors = format_validation_errors(e)
        raise ConfigurationError("Snapshot validation failed:\n" + details, errors=errors) from e

    logger.debug("Snapshot parsed", exported=snapshot.exported, generator=snapshot.generator)
    return snapshot.to_domain()
