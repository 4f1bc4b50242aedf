"""
Launch a Multipass instance with sensible defaults and configure it for SSH.

The heavy lifting (VM creation, networking, remote execution) is delegated to
the `multipass` CLI and standard SSH tooling. This package only orchestrates
the sequence: preflight checks, launch, and three post-launch steps.
"""

__version__ = "0.1.0"
