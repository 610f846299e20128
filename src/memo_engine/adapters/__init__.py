"""Host adapters for the memo editor core."""
