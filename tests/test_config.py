import pytest

from tcpmcast.config import ServerConfig, format_ipv4, ipv4


def test_ipv4_round_trip():
    assert format_ipv4(ipv4(192, 168, 1, 152)) == "192.168.1.152"


def test_ipv4_orders_octets_most_significant_first():
    assert ipv4(0, 0, 0, 1) < ipv4(0, 0, 1, 0) < ipv4(0, 1, 0, 0) < ipv4(1, 0, 0, 0)


def test_ipv4_extremes():
    assert format_ipv4(ipv4(0, 0, 0, 0)) == "0.0.0.0"
    assert format_ipv4(ipv4(255, 255, 255, 255)) == "255.255.255.255"


@pytest.mark.parametrize("octets", [(256, 0, 0, 0), (0, 0, 0, -1)])
def test_ipv4_rejects_bad_octet(octets):
    with pytest.raises(ValueError):
        ipv4(*octets)


def test_format_ipv4_rejects_out_of_range():
    with pytest.raises(ValueError):
        format_ipv4(1 << 32)


def test_default_server_address():
    config = ServerConfig()
    assert format_ipv4(config.ip) == "192.168.1.152"
    assert config.port == 12345
    assert config.burst_size == 32
    assert config.max_clients == 10


def test_mac_normalised_to_bytes():
    config = ServerConfig(mac=bytearray(b"\x02\x00\x00\x00\x00\x09"))
    assert config.mac == b"\x02\x00\x00\x00\x00\x09"


def test_bad_mac_rejected():
    with pytest.raises(ValueError):
        ServerConfig(mac=b"\x02\x00")


def test_bad_port_rejected():
    with pytest.raises(ValueError):
        ServerConfig(port=70000)