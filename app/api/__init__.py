"""
API module - FastAPI routers and endpoint definitions.

- routes: one router per entity (internships, applications, students, ...)
- dependencies: service wiring injected into the routes

Usage:
    from app.api.routes import api_router
    app.include_router(api_router, prefix="/api")
"""
