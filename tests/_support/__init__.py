"""
Test support utilities for opstatus tests.

Helpers that are not pytest fixtures but are shared across test files,
such as workload refs and ready workload state builders.
"""
