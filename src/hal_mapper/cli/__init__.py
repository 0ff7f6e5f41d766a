"""Command line interface for HAL Mapper."""
