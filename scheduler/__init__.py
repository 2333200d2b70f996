"""Periodic jobs and configuration for live recommendation sessions."""
