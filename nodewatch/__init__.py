"""Node health monitoring and cross-submission audit for blockchain RPC endpoints."""

__version__ = "0.1.0"
