"""Adapters implementing the domain ports against real services and files."""
