"""Domain models for HAL Mapper."""
