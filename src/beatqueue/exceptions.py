class BeatqueueError(Exception):
    """Base class for beatqueue errors"""
    pass


class ConfigError(BeatqueueError):
    """Configuration file is unreadable or holds invalid values"""
    pass


class SnapshotError(BeatqueueError):
    """Persisted snapshot could not be read or written"""
    pass
