"""Qt widgets for the crop editor."""
