"""Core Package - registry client, downloads, configuration and errors."""
