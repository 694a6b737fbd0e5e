"""Tests for the cas-install command line tool."""
