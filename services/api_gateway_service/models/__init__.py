"""
Data models for API Gateway Service.

Contains the Pydantic request bodies accepted by the client-facing routes.
Bodies are validated here before any back-end call is made.
"""
