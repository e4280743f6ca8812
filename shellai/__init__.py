"""
shell-ai: a terminal assistant that plans and runs multi-step tasks with tools.
"""

__version__ = "0.1.0"
