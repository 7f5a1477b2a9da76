#!/usr/bin/env python3
"""
Core utilities shared by the Daybook store: exceptions, logging,
validation, path resolution and the credential store interface.
"""
