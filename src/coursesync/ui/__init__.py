"""User interfaces for coursesync."""
