"""
Initialize the CLI package. Contains the Typer apps for each command group.
"""
