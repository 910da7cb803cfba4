"""HTTP handlers for the dashboard API."""
