"""HTTP API for driving a serial monitor session."""
