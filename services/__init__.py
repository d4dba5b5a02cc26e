"""
Service layer: caching, transcript acquisition, AI generation and orchestration.
"""
