"""Care-coordination notification service."""
