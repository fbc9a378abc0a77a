"""SysCleaner: disk space reclamation for temp folders, caches and logs."""

__version__ = "0.3.0"
