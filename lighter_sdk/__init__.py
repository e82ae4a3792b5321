"""Order and transaction request types and a WebSocket streaming client for the Lighter exchange."""

__version__ = "0.1.1"