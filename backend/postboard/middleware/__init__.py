# Middleware package init
"""
Postboard Backend - Middleware Package
========================================

Middleware Chain (request direction):
    Request → [User Context] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. User Context: exposes the gateway-forwarded user id to handlers and logs
    2. Request ID: correlation ID for logs and error envelopes
    3. Logging: one access line per request with status and duration
"""
