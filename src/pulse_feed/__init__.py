"""Pulse Feed: social feed composition and interaction service."""
