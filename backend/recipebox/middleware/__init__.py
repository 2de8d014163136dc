# Middleware package init
"""
RecipeBox Backend — Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation ID
    2. Logging: records status and duration once the response is known
"""
