"""
FastAPI Todo API package.

The ASGI application lives at `todo_api.main:app`; use
`todo_api.main.create_app()` to build one with injected settings or storage.
"""
