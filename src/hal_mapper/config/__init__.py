"""Configuration loading and schema for HAL Mapper."""
