"""Player state machine and the store that drives a media backend."""
