"""Core — Dual-write synchronization, read routing and the application engine."""
