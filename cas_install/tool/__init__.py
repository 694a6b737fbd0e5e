"""Command line tool for cas-install."""
