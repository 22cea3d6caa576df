"""Test doubles shared across the curl-runner test suite."""
