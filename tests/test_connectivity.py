import socket

from admin_app import connectivity
from admin_app.connectivity import ConnectivityMonitor, has_internet_connection


def test_lookup_success_means_online(monkeypatch):
    def fake_getaddrinfo(host, port):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("142.250.1.1", port))]

    monkeypatch.setattr(connectivity.socket, "getaddrinfo", fake_getaddrinfo)
    assert has_internet_connection("google.com", timeout=1.0)


def test_lookup_failure_means_offline(monkeypatch):
    def fake_getaddrinfo(host, port):
        raise socket.gaierror("no route")

    monkeypatch.setattr(connectivity.socket, "getaddrinfo", fake_getaddrinfo)
    assert not has_internet_connection("google.com", timeout=1.0)


def test_monitor_reports_transitions_only():
    results = iter([True, False, False, True])
    changes = []
    monitor = ConnectivityMonitor(probe=lambda: next(results), signature=lambda: (), on_change=changes.append)

    for _ in range(4):
        monitor.check()

    assert changes == [False, True]
    assert monitor.online


def test_probe_exception_counts_as_offline():
    def broken():
        raise OSError("boom")

    monitor = ConnectivityMonitor(probe=broken, signature=lambda: ())
    assert monitor.check() is False
    assert not monitor.online


def test_network_changed_compares_interface_snapshots():
    snapshots = iter([("eth0", "lo"), ("eth0", "lo"), ("lo",)])
    monitor = ConnectivityMonitor(probe=lambda: True, signature=lambda: next(snapshots))

    assert not monitor.network_changed()
    assert monitor.network_changed()
