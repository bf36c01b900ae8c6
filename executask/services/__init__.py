"""Business services sitting between the HTTP handlers and the repositories."""
