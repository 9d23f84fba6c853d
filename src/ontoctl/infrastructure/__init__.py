"""Infrastructure layer — code generation, source loading, caching, storage backends.

This layer depends on stdlib, the domain layer, and third-party libs
(Jinja2, httpx, rdflib). It must never import from services, commands, or output.
"""
