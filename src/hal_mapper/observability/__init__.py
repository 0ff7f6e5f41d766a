"""Observability helpers for HAL Mapper."""
