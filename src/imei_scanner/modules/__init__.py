"""Pipeline stages: detection, extraction, matching and result accumulation."""
