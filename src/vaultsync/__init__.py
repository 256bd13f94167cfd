"""vaultsync - bidirectional sync between markdown task lines and Todoist."""

__version__ = "0.1.0"
