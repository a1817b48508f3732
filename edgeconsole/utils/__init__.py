"""Utility helpers for edgeconsole."""
