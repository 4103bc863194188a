"""Toolsmith toolkit: validation, formatting, registry, runner and example tools."""
