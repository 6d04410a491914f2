"""HTTP API for Pitch Arena."""
