"""Data models — API payloads, canonical article views and search documents."""
