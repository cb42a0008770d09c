"""Dotenv file adapter."""
