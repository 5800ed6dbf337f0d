"""Orchestration layer: the records facade and the command line entry point."""
