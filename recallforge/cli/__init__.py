"""Command line interface for RecallForge."""
