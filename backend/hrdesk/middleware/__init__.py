"""
HR Desk Backend - Middleware Package
=====================================

Cross-cutting concerns shared by the attendance and recruitment apps.

Middleware chain (request direction):
    [Request ID] → [Rate Limit (optional)] → [Logging] → [GZip] → [CORS] → route

The rate limiter is only installed when RATE_LIMIT_ENABLED is set.
"""
