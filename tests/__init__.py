"""
Test package for Gravity.

This package contains unit tests for manifest loading, sync state persistence,
change classification, sync execution and the command line interface.
"""
