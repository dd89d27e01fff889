from unittest.mock import patch

import pytest

from unified_dash.services.monitoring import GpuReading, TelemetryProbe, get_gpu_readings


class TestGetGpuReadings:
    def test_no_driver_returns_empty(self):
        with patch("py3nvml.py3nvml.nvmlInit", side_effect=Exception("NVML not found")):
            assert get_gpu_readings() == []


class TestTelemetryProbe:
    async def test_collect_updates_matching_gpus(self, repository):
        readings = [
            GpuReading(index=0, name="RTX", utilization=0.33, vram_used_gb=10.0, vram_total_gb=24.0, temperature=61),
            GpuReading(index=7, name="Ghost", utilization=0.9, vram_used_gb=1.0, vram_total_gb=8.0),
        ]
        probe = TelemetryProbe(repository, interval=60)
        with (
            patch("unified_dash.services.monitoring.get_gpu_readings", return_value=readings),
            patch("unified_dash.services.monitoring.get_disk_usage", return_value=None),
        ):
            await probe.collect()

        gpu0 = await repository.gpus.get("gpu0")
        assert gpu0.utilization == 0.33
        assert gpu0.vram_total == 24.0
        assert gpu0.temperature == 61
        assert gpu0.name == "GPU 0"
        assert await repository.gpus.get("gpu7") is None

    async def test_collect_updates_storage(self, repository):
        probe = TelemetryProbe(repository, interval=60)
        with (
            patch("unified_dash.services.monitoring.get_gpu_readings", return_value=[]),
            patch("unified_dash.services.monitoring.get_disk_usage", return_value=(100.0, 400.0, 25.0)),
        ):
            await probe.collect()

        for volume in await repository.storage.list_all():
            assert volume.used_gb == 100.0
            assert volume.total_gb == 400.0
            assert volume.usage_percent == 25.0

    async def test_start_stop(self, repository):
        probe = TelemetryProbe(repository, interval=60)
        with (
            patch("unified_dash.services.monitoring.get_gpu_readings", return_value=[]),
            patch("unified_dash.services.monitoring.get_disk_usage", return_value=None),
        ):
            await probe.start()
            await probe.stop()
        assert probe._task is None


@pytest.mark.parametrize("path", ["/definitely/not/here"])
def test_disk_usage_missing_path(path):
    from unified_dash.services.monitoring import get_disk_usage

    assert get_disk_usage(path) is None
