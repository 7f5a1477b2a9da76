#!/usr/bin/env python3
"""
Database configuration modules.

This package contains declarative configurations for database operations:
- json_export_configs: Entity serialization for bundle export
"""
