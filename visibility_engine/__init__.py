"""
AI Visibility Scanner

Measures how visible a brand is inside AI-assistant answers:
1. Profiles the product behind a URL
2. Generates and validates intent-driven buyer queries
3. Runs the queries against multiple LLM providers
4. Detects brand and competitor mentions in the answers
5. Scores visibility (0-100) and tracks competitor trends
"""

__version__ = "0.1.0"
