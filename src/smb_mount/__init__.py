"""smb_mount - SMB/CIFS share mount manager."""

__version__ = "0.1.0"
