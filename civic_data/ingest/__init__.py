"""Source fetching, field extraction, health tracking and run orchestration."""
