"""An interactive shell with pipelines, redirections, here-documents, variables and wildcards."""

__version__ = "0.1.0"