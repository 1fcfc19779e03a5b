# Copyright (c) 2025 Trae AI. All rights reserved.

import socket
from typing import List


def local_addresses() -> List[str]:
    """
    IPv4 addresses other machines on the LAN can use to reach this host.
    """
    addresses = set()
    try:
        for info in socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET):
            addresses.add(info[4][0])
    except socket.gaierror:
        pass

    # No packet is sent; connect() on UDP only selects the outgoing interface
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("10.255.255.255", 1))
            addresses.add(s.getsockname()[0])
    except OSError:
        pass

    return sorted(a for a in addresses if not a.startswith("127."))
