"""Adapters for HAL Mapper."""
