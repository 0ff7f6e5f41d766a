"""Application services for HAL Mapper."""
