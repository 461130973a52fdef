"""Tests for the network reachability signal."""

import pytest


class TestNetworkReachabilitySignal:
    def test_defaults_to_disconnected(self):
        from models.enums import ConnectionType
        from workflow.network import NetworkReachabilitySignal
        signal = NetworkReachabilitySignal()
        assert signal.is_connected is False
        assert signal.connection_type == ConnectionType.UNKNOWN

    @pytest.mark.asyncio
    async def test_update_notifies_every_time(self):
        from workflow.network import NetworkReachabilitySignal
        signal = NetworkReachabilitySignal()
        readings = []

        async def listener(is_connected):
            readings.append(is_connected)

        signal.subscribe(listener)
        await signal.update(True)
        await signal.update(True)
        await signal.update(False)
        assert readings == [True, True, False]
        assert signal.is_connected is False

    @pytest.mark.asyncio
    async def test_connection_type_kept_unless_given(self):
        from models.enums import ConnectionType
        from workflow.network import NetworkReachabilitySignal
        signal = NetworkReachabilitySignal()
        await signal.update(True, ConnectionType.WIFI)
        await signal.update(False)
        assert signal.connection_type == ConnectionType.WIFI

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        from workflow.network import NetworkReachabilitySignal
        signal = NetworkReachabilitySignal()
        readings = []

        async def listener(is_connected):
            readings.append(is_connected)

        unsubscribe = signal.subscribe(listener)
        unsubscribe()
        unsubscribe()
        await signal.update(True)
        assert readings == []

    def test_always_online(self):
        from workflow.network import AlwaysOnlineSignal
        assert AlwaysOnlineSignal().is_connected is True
