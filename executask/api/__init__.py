"""HTTP API for ExecuTask."""
