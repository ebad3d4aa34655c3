"""Shared configuration, logging, errors, money helpers, and paths."""
