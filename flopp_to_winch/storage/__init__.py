"""Volume parsing and image reconstruction."""
