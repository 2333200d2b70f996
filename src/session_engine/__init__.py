"""Recommendation session engine: models, reducers and session orchestration."""
