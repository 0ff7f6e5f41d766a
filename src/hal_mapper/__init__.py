"""HAL Mapper - binding physical I/O points to application signals.

This package provides:
- A data model for hardware modules, fieldbus devices and application signals
- A mapping manager that keeps bindings unique and computes grounding
- A validation engine that flags inconsistent or incomplete bindings
- Exporters for PLC import formats, spreadsheets and printable reports
"""

__version__ = "0.1.0"

__author__ = "HAL Mapper Team"

from hal_mapper.domain.model.catalog import MappingSource, MappingStatus, SignalType

__all__ = [
    "MappingSource",
    "MappingStatus",
    "SignalType",
    "__version__",
]
