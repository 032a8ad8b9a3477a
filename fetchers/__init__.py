"""Collaborators that talk to the trends backend and the LLM APIs."""
