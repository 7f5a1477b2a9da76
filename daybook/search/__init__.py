#!/usr/bin/env python3
"""
Full-text search over diary entries.

The shadow index lives in search_index; it is maintained by the entry
store and queried through DaybookDB.search_entries().
"""
