"""
HTTP API layer.

- routes_enrichment.py: /api/process-ai, /api/ai-status, /api/analyze-*
- routes_responses.py: /api/nps-responses, /api/nps-stats, /health
- error_handlers.py: domain exception -> HTTP status mapping
- middleware.py: request id tracing
"""
