"""Core module containing data models and analysis orchestration."""
