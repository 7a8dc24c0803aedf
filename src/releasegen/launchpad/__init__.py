"""Launchpad backend, scraped from git.launchpad.net pages."""
