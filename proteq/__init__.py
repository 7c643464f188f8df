"""ProteQ backend: activity log and password-reset services."""
