# Routes package init
"""
CV Site Backend — API Routes Package
======================================

Route Inventory:
    - resources.py: /api/skills, /api/projects (built by cvsite.crud)
    - health.py:    GET /health (service health check)
"""
