"""Command-line tooling for inspecting activity files."""
