"""HTTP API for the IR bridge."""
