"""CLI commands for the devban board."""
