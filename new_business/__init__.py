"""
New Business Tracker

Tracks newly written insurance policies through their underwriting
requirement checklists:
- status derivation from requirement progress
- urgency ranking of the active list
- whole-collection storage (JSON file or MongoDB) with backup import/export
- Gemini (Vertex AI) drafted client emails
"""

__version__ = "1.0.0"
