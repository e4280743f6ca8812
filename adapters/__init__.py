"""Model-service adapters shared by the shell-ai packages."""
