from .snapshot import Snapshot, snapshot_from_state
from .store import SnapshotStore

__all__ = ['Snapshot', 'SnapshotStore', 'snapshot_from_state']
