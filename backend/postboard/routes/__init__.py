# Routes package init
"""
Postboard Backend - API Routes Package
========================================

Route Inventory:
    - posts.py:   /posts resource (list, search, get, create, update,
                  delete, likePost, commentPost)
    - health.py:  GET /health (service health check)

Routes stay thin: read the request, call PostService, return its result.
"""
