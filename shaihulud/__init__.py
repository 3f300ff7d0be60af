"""SHAI-HULUD: mount, ride and dismount a sandworm, then do it again faster."""

__version__ = "0.1.0"
