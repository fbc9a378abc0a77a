"""Cleanup engine: classifier, directory cleaner and orchestration."""
