"""Credential hashing and session token handling."""
