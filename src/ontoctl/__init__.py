"""ontoctl — compile Turtle capability ontologies into click command-line interfaces."""

__version__ = "0.1.0"
