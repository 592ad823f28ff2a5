"""Core infrastructure: results and errors, console/logging, configuration, command execution."""
