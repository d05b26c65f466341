"""Publish workspace packages in dependency order."""
