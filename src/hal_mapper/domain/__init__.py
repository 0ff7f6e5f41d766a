"""Domain layer for HAL Mapper."""
