"""Long-running jobs: the polling scheduler and the retention sweep."""
