"""
Marathon Event API — Pydantic Schemas
=======================================

What:  API contracts between frontend and backend.
How:   FastAPI validates request bodies against the *Create / *Update models
       and serializes responses through the *Document / *Result models.
"""
