"""Gateway service packages."""
