"""Background jobs: task queue, notifications and the periodic schedule."""
