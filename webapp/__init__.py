"""Basic server-rendered web application."""
