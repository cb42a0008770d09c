"""Adapters for the dotenv file and the process environment."""
