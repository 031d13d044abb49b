"""HTTP API for Booru Stage."""
