"""Gitea backend with monorepo support."""
