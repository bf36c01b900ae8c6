"""Authentication for ExecuTask."""
