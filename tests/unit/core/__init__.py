"""
Unit tests for topomap core modules.
"""
