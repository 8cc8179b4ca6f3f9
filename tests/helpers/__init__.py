"""
Test helper utilities for edfdecode testing.

This module provides reusable utilities for:
- Building synthetic EDF/EDF+ byte buffers
- Encoding TAL annotation blocks
"""
