"""Optional host probe that feeds real GPU and disk readings into the repository."""

import asyncio
from dataclasses import dataclass

import structlog

from unified_dash.services.repository import Repository

logger = structlog.get_logger()


@dataclass
class GpuReading:
    index: int
    name: str
    utilization: float  # 0-1
    vram_used_gb: float
    vram_total_gb: float
    temperature: int | None = None


def get_gpu_readings() -> list[GpuReading]:
    """Detect GPUs via py3nvml. Returns empty list if no NVIDIA GPU or driver."""
    try:
        from py3nvml.py3nvml import (
            NVML_TEMPERATURE_GPU,
            nvmlDeviceGetCount,
            nvmlDeviceGetHandleByIndex,
            nvmlDeviceGetMemoryInfo,
            nvmlDeviceGetName,
            nvmlDeviceGetTemperature,
            nvmlDeviceGetUtilizationRates,
            nvmlInit,
            nvmlShutdown,
        )

        nvmlInit()
        count = nvmlDeviceGetCount()
        readings = []
        for i in range(count):
            handle = nvmlDeviceGetHandleByIndex(i)
            name = nvmlDeviceGetName(handle)
            if isinstance(name, bytes):
                name = name.decode("utf-8")
            mem = nvmlDeviceGetMemoryInfo(handle)
            util = nvmlDeviceGetUtilizationRates(handle)
            try:
                temperature = int(nvmlDeviceGetTemperature(handle, NVML_TEMPERATURE_GPU))
            except Exception:
                temperature = None
            readings.append(
                GpuReading(
                    index=i,
                    name=name,
                    utilization=min(1.0, float(util.gpu) / 100),
                    vram_used_gb=round(mem.used / (1024**3), 1),
                    vram_total_gb=round(mem.total / (1024**3), 1),
                    temperature=temperature,
                )
            )
        nvmlShutdown()
        return readings
    except Exception as e:
        logger.debug("gpu_detection_unavailable", reason=str(e))
        return []


def get_disk_usage(path: str) -> tuple[float, float, float] | None:
    """Return (used_gb, total_gb, percent) for ``path`` via psutil, or None."""
    try:
        import psutil

        usage = psutil.disk_usage(path)
    except Exception as e:
        logger.debug("disk_usage_unavailable", path=path, reason=str(e))
        return None
    return round(usage.used / (1024**3), 1), round(usage.total / (1024**3), 1), usage.percent


class TelemetryProbe:
    """Polls the host and updates GPU (``gpu{index}``) and storage entities in place."""

    def __init__(self, repository: Repository, interval: float = 15.0):
        self._repository = repository
        self._interval = interval
        self._task: asyncio.Task | None = None
        self._running = False

    async def start(self) -> None:
        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info("telemetry_probe_started", interval=self._interval)

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("telemetry_probe_stopped")

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await self.collect()
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("telemetry_probe_error")
                await asyncio.sleep(self._interval)

    async def collect(self) -> None:
        """Run one probe pass. Entities without a matching reading are left untouched."""
        readings = await asyncio.to_thread(get_gpu_readings)
        for reading in readings:
            await self._repository.gpus.update(
                f"gpu{reading.index}",
                {
                    "utilization": reading.utilization,
                    "vram_used": reading.vram_used_gb,
                    "vram_total": reading.vram_total_gb,
                    "temperature": reading.temperature,
                },
            )

        for volume in await self._repository.storage.list_all():
            usage = await asyncio.to_thread(get_disk_usage, volume.path)
            if usage is None:
                continue
            used_gb, total_gb, percent = usage
            await self._repository.storage.update(
                volume.id, {"used_gb": used_gb, "total_gb": total_gb, "usage_percent": percent}
            )
