"""Domain layer — RDF terms, the Turtle/SPARQL pipeline, and the command model.

This layer depends only on stdlib, pydantic, and networkx (type graph checks).
It must never import from services, infrastructure, commands, or config.
"""
