"""Timed test-taking and scoring service."""
