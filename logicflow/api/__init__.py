"""
API package - FastAPI routes and schemas.
"""

from logicflow.api.routes import flows, nodes, runs

__all__ = ["flows", "nodes", "runs"]
