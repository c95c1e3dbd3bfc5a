"""
=============================================================================
LOCAL IP DISCOVERY
=============================================================================

Finds an IPv4 address other devices on the same WiFi network can probably
reach us on. The answer is advisory: it only decorates the URL printed
for the user. Binding always uses 0.0.0.0 and no security decision ever
depends on it.

=============================================================================
STRATEGIES
=============================================================================

Each strategy is a plain function returning Optional[str]. They are tried
in order and the first address wins:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ 1. wireless_interfaces   interfaces the kernel lists as wireless    │
    │                          (/proc/net/wireless)                       │
    │ 2. wifi_named_interfaces interfaces named like wlan0, wifi0, wlp2s0 │
    │ 3. any_private_address   every non-loopback interface, the default │
    │                          route's source address, the host name     │
    └─────────────────────────────────────────────────────────────────────┘

Only private (RFC 1918) addresses are accepted:

    10.0.0.0/8       10.0.0.0    – 10.255.255.255
    172.16.0.0/12    172.16.0.0  – 172.31.255.255
    192.168.0.0/16   192.168.0.0 – 192.168.255.255

A strategy never raises; a failure is logged at DEBUG and counts as "no
address".

=============================================================================
"""

import logging
import socket
import struct
import sys
from typing import Callable, Iterable, List, Optional, Sequence


logger = logging.getLogger(__name__)


IPStrategy = Callable[[], Optional[str]]

WIFI_NAME_MARKERS = ("wlan", "wifi", "wl")
PROC_WIRELESS = "/proc/net/wireless"

_SIOCGIFADDR = 0x8915  # Linux ioctl: get interface IPv4 address


def is_private_ipv4(ip: Optional[str]) -> bool:
    """
    True for dotted-quad addresses in 10/8, 172.16/12 or 192.168/16.

        >>> is_private_ipv4("192.168.1.20")
        True
        >>> is_private_ipv4("172.32.0.1")
        False
        >>> is_private_ipv4("8.8.8.8")
        False
    """
    if not ip:
        return False

    parts = ip.split(".")
    if len(parts) != 4:
        return False

    try:
        octets = [int(p) for p in parts]
    except ValueError:
        return False
    if any(not 0 <= o <= 255 for o in octets):
        return False

    first, second = octets[0], octets[1]
    if first == 10:
        return True
    if first == 172:
        return 16 <= second <= 31
    if first == 192:
        return second == 168
    return False


# =============================================================================
# INTERFACE HELPERS
# =============================================================================


def list_interfaces() -> List[str]:
    """Names of all network interfaces, or [] where unsupported."""
    try:
        return [name for _, name in socket.if_nameindex()]
    except (AttributeError, OSError) as e:
        logger.debug(f"Interface enumeration unavailable: {e}")
        return []


def interface_ipv4(name: str) -> Optional[str]:
    """
    IPv4 address of one interface via the SIOCGIFADDR ioctl.

    Returns None for interfaces without an IPv4 address and on platforms
    other than Linux.
    """
    if not sys.platform.startswith("linux"):
        return None

    import fcntl  # POSIX only

    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            packed = fcntl.ioctl(
                sock.fileno(),
                _SIOCGIFADDR,
                struct.pack("256s", name[:15].encode("utf-8")),
            )
        except OSError:
            return None
    return socket.inet_ntoa(packed[20:24])


def first_private(addresses: Iterable[Optional[str]]) -> Optional[str]:
    for ip in addresses:
        if is_private_ipv4(ip):
            return ip
    return None


def _is_loopback_name(name: str) -> bool:
    return name == "lo" or name.startswith("lo:")


# =============================================================================
# STRATEGIES
# =============================================================================


def wireless_interfaces() -> Optional[str]:
    """Strategy 1: interfaces registered with the kernel's wireless stack."""
    try:
        with open(PROC_WIRELESS, encoding="utf-8") as f:
            lines = f.read().splitlines()
    except OSError as e:
        logger.debug(f"No wireless registry at {PROC_WIRELESS}: {e}")
        return None

    # Two header lines, then "  wlan0: 0000   70.  -40.  ..."
    names = [line.split(":", 1)[0].strip() for line in lines[2:] if ":" in line]
    return first_private(interface_ipv4(name) for name in names)


def wifi_named_interfaces() -> Optional[str]:
    """Strategy 2: interfaces whose name looks like a WiFi adapter."""
    names = [
        name for name in list_interfaces()
        if any(marker in name.lower() for marker in WIFI_NAME_MARKERS)
    ]
    return first_private(interface_ipv4(name) for name in names)


def _default_route_address() -> Optional[str]:
    # connect() on a UDP socket sends nothing; it only picks the source
    # address the kernel would route through.
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.connect(("10.255.255.255", 1))
            return sock.getsockname()[0]
        except OSError:
            return None


def _hostname_addresses() -> List[str]:
    try:
        return socket.gethostbyname_ex(socket.gethostname())[2]
    except OSError:
        return []


def any_private_address() -> Optional[str]:
    """Strategy 3: any private IPv4 on any non-loopback interface."""
    candidates = [
        interface_ipv4(name)
        for name in list_interfaces()
        if not _is_loopback_name(name)
    ]
    candidates.append(_default_route_address())
    candidates.extend(_hostname_addresses())
    return first_private(candidates)


DEFAULT_STRATEGIES: Sequence[IPStrategy] = (
    wireless_interfaces,
    wifi_named_interfaces,
    any_private_address,
)


def first_success(strategies: Sequence[IPStrategy]) -> Optional[str]:
    """
    Run strategies in order; return the first address one produces.

    An exception inside a strategy is logged and treated as "no result".
    """
    for strategy in strategies:
        name = getattr(strategy, "__name__", repr(strategy))
        try:
            ip = strategy()
        except Exception as e:
            logger.debug(f"IP strategy {name} failed: {e}")
            continue
        if ip:
            logger.debug(f"IP strategy {name} found {ip}")
            return ip
        logger.debug(f"IP strategy {name} found nothing")
    return None


def find_wifi_ip(strategies: Sequence[IPStrategy] = DEFAULT_STRATEGIES) -> Optional[str]:
    """Best-effort LAN address of this machine, or None."""
    ip = first_success(strategies)
    if ip is None:
        logger.warning("Could not determine a local network address")
    return ip
