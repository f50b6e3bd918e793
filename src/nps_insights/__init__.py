"""
NPS Insights: survey analytics backend with AI enrichment.

Ingests customer survey responses (rating + free-text comment), derives
Net Promoter Score segments, and enriches each comment with:
- Sentiment (positive / neutral / negative)
- Topics (closed banking-app taxonomy, up to 3 per comment)

Architecture: FastAPI + Ollama inference + tolerant reply parsing + SQLite store
"""

__version__ = "0.1.0"
