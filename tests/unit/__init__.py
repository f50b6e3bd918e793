"""
Unit tests for NPS Insights.

Test individual components in isolation:
- Data models (validation, derived fields, camelCase output)
- Prompt builder and reply parsing stages
- Classification client failure policy and keyword fallback
- Progress tracker and enrichment orchestrator
- Response repository (in-memory SQLite)
"""
