# -*- coding: utf-8 -*-
"""Dependency injection."""

from pets_tracker.DI.container import Container

__all__ = ["Container"]
