"""Recipe adjustment: prompt construction and the proposal service."""
