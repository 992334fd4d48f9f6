"""Runtime: retry, execution and observability."""
