"""Run-time configuration."""
