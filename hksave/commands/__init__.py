"""Command implementations behind the hksave CLI."""
