"""Terminal dashboard backed by the explorer API."""
