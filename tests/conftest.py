"""
Pytest fixtures for nbs-sshd tests.

Provides:
- A realistic sshd_config sample (as text and as a file)
- A fully populated SshdConfig built through the public API
- A running SshdConfigServer for integration tests
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, AsyncGenerator

import pytest

from nbs_sshd import LogLevel, Match, SshdConfig

if TYPE_CHECKING:
    from nbs_sshd.testing import SshdConfigServer


SAMPLE_CONFIG = """\
# Package generated configuration file
# See the sshd_config(5) manpage for details

# What ports, IPs and protocols we listen for
Port 2222
Protocol 2
HostKey /etc/ssh/ssh_host_ed25519_key
UsePrivilegeSeparation yes

KeyRegenerationInterval 3600
ServerKeyBits 1024
SyslogFacility AUTH
LogLevel VERBOSE

LoginGraceTime 120
PermitRootLogin without-password
StrictModes yes

PubkeyAuthentication yes
IgnoreRhosts yes
HostbasedAuthentication no
PermitEmptyPasswords no
ChallengeResponseAuthentication no

X11Forwarding yes
X11DisplayOffset 10
PrintMotd no
PrintLastLog yes
TCPKeepAlive yes

AcceptEnv LANG LC_*
Subsystem sftp /usr/lib/openssh/sftp-server
UsePAM yes

Ciphers aes128-ctr,aes192-ctr,aes256-ctr
KexAlgorithms curve25519-sha256,diffie-hellman-group14-sha256
HostKeyAlgorithms ssh-ed25519,rsa-sha2-512
MACs hmac-sha2-256,hmac-sha2-512

Match User alice,bob Address 10.0.0.0/8
    AuthenticationMethods publickey
Match Address 192.168.0.0/16
    # only keys from the lab network
    AuthenticationMethods publickey,password
"""


@pytest.fixture
def sample_text() -> str:
    """A realistic sshd_config with comments, ignored options and Match blocks."""
    return SAMPLE_CONFIG


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """The sample configuration written to disk."""
    path = tmp_path / "sshd_config"
    path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def full_config() -> SshdConfig:
    """A configuration with every field moved away from its default."""
    config = SshdConfig(
        port=2022,
        host_key_file="/etc/ssh/ssh_host_rsa_key",
        challenge_response_authentication=True,
        log_level=LogLevel.DEBUG3,
        use_pam=False,
        use_privilege_separation=False,
        protocol="2",
        x11_forwarding=True,
        print_motd=True,
    )
    config.add_subsystem("sftp", "internal-sftp -l INFO")
    config.add_subsystem("backup", "/usr/local/bin/backup-server")
    config.add_accepted_environment_variable("LANG")
    config.add_accepted_environment_variable("LC_*")
    config.set_ciphers(["aes256-gcm@openssh.com", "aes128-ctr"])
    config.set_host_key_algorithms(["ssh-ed25519"])
    config.set_key_exchange_algorithms(["curve25519-sha256"])
    config.set_mac_algorithms(["hmac-sha2-512", "hmac-sha2-256"])
    config.add_match(Match(users={"sshnet"}, authentication_methods="publickey,password"))
    config.add_match(Match(addresses={"127.0.0.1", "::1"}))
    config.add_match(Match(
        users={"alice", "bob"},
        addresses={"10.0.0.0/8"},
        authentication_methods="publickey",
    ))
    return config


@pytest.fixture
async def sshd_server() -> AsyncGenerator["SshdConfigServer", None]:
    """
    Fixture providing a running SshdConfigServer on a free port.

    Usage:
        async def test_example(sshd_server):
            async with asyncssh.connect(
                "127.0.0.1", port=sshd_server.port,
                username="test", password="test", known_hosts=None,
            ) as conn:
                ...
    """
    from nbs_sshd.testing import SshdConfigServer

    config = SshdConfig()
    config.set_ciphers(["aes256-ctr", "aes128-ctr"])
    config.add_match(Match(users={"alice"}, authentication_methods="publickey"))

    async with SshdConfigServer(config, username="test", password="test", port=0) as server:
        yield server
