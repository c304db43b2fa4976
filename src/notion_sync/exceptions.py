"""Exception root shared by configuration, transport and tree loading."""


class NotionSyncError(Exception):
    """Base class for all notion-sync errors."""
