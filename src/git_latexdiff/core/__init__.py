"""Pipeline orchestration, configuration and workspace management."""
