import socket


def get_local_ip() -> str:
    """First non-loopback IPv4 address, or 'localhost'.

    A UDP connect sends nothing; it only makes the OS pick the outbound interface.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(("10.255.255.255", 1))
        address = sock.getsockname()[0]
    except OSError:
        return "localhost"
    finally:
        sock.close()
    if address.startswith("127."):
        return "localhost"
    return address
