"""HTTP surface exposing the dashboard payloads as JSON (FastAPI)."""
