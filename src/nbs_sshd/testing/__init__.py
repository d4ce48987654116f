"""
Testing utilities for nbs-sshd.

Provides SshdConfigServer for exercising SSH clients against a
configuration without a real sshd.
"""
from nbs_sshd.testing.server import SshdConfigServer, server_options

__all__ = ["SshdConfigServer", "server_options"]
