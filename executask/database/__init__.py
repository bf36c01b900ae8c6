"""Persistence layer for ExecuTask."""
