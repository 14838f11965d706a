"""Services Layer — async orchestration of core logic around persistence."""
