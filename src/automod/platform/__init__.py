"""Outbound platform gateway protocol and its py-cord implementation."""
