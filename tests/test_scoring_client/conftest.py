"""Fixtures with realistic scoring service response dicts for testing."""

from __future__ import annotations

import pytest


@pytest.fixture
def recommendations_response() -> dict:
    """Realistic ``/api/ml-recommendations`` response with three ranked tracks."""
    return {
        "status": "success",
        "recommendations": [
            {
                "track_name": "Lose Yourself",
                "artist": "Eminem",
                "track_id": "7w9bgPAmPTtrkt2v16QWvQ",
                "similarity_score": 0.92,
                "ml_confidence": 0.9,
                "physiological_reasoning": "Tempo 171 BPM matches cadence in zone 3",
                "energy": 0.83,
                "tempo": 171.4,
                "valence": 0.06,
                "danceability": 0.69,
                "acousticness": 0.01,
                "url": "https://open.spotify.com/track/7w9bgPAmPTtrkt2v16QWvQ",
                "preview_url": None,
                "duration_ms": 326000,
            },
            {
                "track_name": "Stronger",
                "artist": "Kanye West",
                "track_id": "4fzsfWzRhPawzqhX8Qt9F3",
                "similarity_score": 0.81,
                "ml_confidence": 0.7,
                "physiological_reasoning": "High energy sustains intensity",
                "energy": 0.72,
                "tempo": 104.0,
                "valence": 0.49,
                "danceability": 0.62,
                "url": "https://open.spotify.com/track/4fzsfWzRhPawzqhX8Qt9F3",
                "duration_ms": 311866,
            },
            {
                "track_name": "Eye of the Tiger",
                "artist": "Survivor",
                "track_id": "2KH16WveTQWT6KOG9Rg6e2",
                "similarity_score": 0.74,
                "ml_confidence": 0.5,
                "physiological_reasoning": "Familiar motivational track",
                "energy": 0.61,
                "tempo": 108.9,
                "valence": 0.55,
                "danceability": 0.82,
                "acousticness": 0.25,
            },
        ],
        "optimal_features": {
            "energy": 0.8,
            "tempo": 165.0,
            "valence": 0.6,
            "danceability": 0.7,
            "acousticness": 0.1,
        },
        "adaptation_strategy": "Increase tempo gradually toward cadence",
        "timestamp": "2026-03-14T07:30:00Z",
    }


@pytest.fixture
def real_time_response() -> dict:
    """Realistic ``/api/real-time-data`` response."""
    return {
        "heart_rate": 148.2,
        "hrv": 38.5,
        "recovery_index": 72.0,
        "intensity_score": 7.9,
        "performance_zone": 3,
        "music_energy": 0.76,
        "timestamp": "2026-03-14T07:31:00Z",
    }
