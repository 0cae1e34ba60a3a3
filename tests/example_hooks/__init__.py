"""Hook packages discovered by naming convention in the test suite."""
