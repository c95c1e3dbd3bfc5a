"""
Unit tests for local IP discovery.
"""

import pytest

from linkbeam import network
from linkbeam.network import find_wifi_ip, first_private, first_success, is_private_ipv4


class TestIsPrivateIPv4:

    @pytest.mark.parametrize("ip", [
        "10.0.0.1",
        "10.255.255.255",
        "172.16.0.1",
        "172.31.255.254",
        "192.168.1.20",
    ])
    def test_private(self, ip):
        assert is_private_ipv4(ip)

    @pytest.mark.parametrize("ip", [
        "8.8.8.8",
        "172.15.0.1",
        "172.32.0.1",
        "192.169.0.1",
        "127.0.0.1",
        "10.0.0",
        "10.0.0.256",
        "not.an.ip.addr",
        "",
        None,
    ])
    def test_not_private(self, ip):
        assert not is_private_ipv4(ip)


class TestStrategies:

    def test_first_private(self):
        assert first_private([None, "127.0.0.1", "192.168.0.5", "10.0.0.1"]) == "192.168.0.5"

    def test_first_success_in_order(self):
        assert first_success([lambda: None, lambda: "10.0.0.2", lambda: "10.0.0.3"]) == "10.0.0.2"

    def test_failing_strategy_skipped(self):
        def broken():
            raise OSError("no interfaces")

        assert first_success([broken, lambda: "192.168.1.9"]) == "192.168.1.9"

    def test_nothing_found(self, caplog):
        assert find_wifi_ip([lambda: None]) is None
        assert "Could not determine" in caplog.text

    def test_wifi_named_interfaces(self, monkeypatch):
        monkeypatch.setattr(network, "list_interfaces", lambda: ["lo", "eth0", "wlan0"])
        addresses = {"lo": "127.0.0.1", "eth0": "192.168.0.2", "wlan0": "192.168.0.3"}
        monkeypatch.setattr(network, "interface_ipv4", addresses.get)

        assert network.wifi_named_interfaces() == "192.168.0.3"

    def test_any_private_skips_loopback(self, monkeypatch):
        monkeypatch.setattr(network, "list_interfaces", lambda: ["lo", "eth0"])
        monkeypatch.setattr(network, "interface_ipv4", {"lo": "10.0.0.1", "eth0": "8.8.8.8"}.get)
        monkeypatch.setattr(network, "_default_route_address", lambda: "172.20.0.4")
        monkeypatch.setattr(network, "_hostname_addresses", lambda: [])

        assert network.any_private_address() == "172.20.0.4"

    def test_wireless_registry_missing(self, monkeypatch, tmp_path):
        monkeypatch.setattr(network, "PROC_WIRELESS", str(tmp_path / "absent"))
        assert network.wireless_interfaces() is None

    def test_wireless_registry(self, monkeypatch, tmp_path):
        registry = tmp_path / "wireless"
        registry.write_text(
            "Inter-| sta-|   Quality        |   Discarded packets\n"
            " face | tus | link level noise |  nwid  crypt   frag\n"
            " wlp2s0: 0000   70.  -40.  -256        0      0      0\n"
        )
        monkeypatch.setattr(network, "PROC_WIRELESS", str(registry))
        monkeypatch.setattr(network, "interface_ipv4", {"wlp2s0": "10.1.2.3"}.get)

        assert network.wireless_interfaces() == "10.1.2.3"
