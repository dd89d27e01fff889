from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/metrics", response_class=PlainTextResponse)
async def prometheus_metrics(request: Request) -> PlainTextResponse:
    """Prometheus exposition format metrics."""
    state = request.app.state
    repository = state.repository

    lines = [
        "# HELP dash_gpu_utilization GPU utilization ratio (0-1)",
        "# TYPE dash_gpu_utilization gauge",
    ]
    gpus = await repository.gpus.list_all()
    for gpu in gpus:
        lines.append(f'dash_gpu_utilization{{gpu="{gpu.id}"}} {gpu.utilization}')
    lines.extend([
        "",
        "# HELP dash_gpu_vram_used_gb GPU memory in use (GB)",
        "# TYPE dash_gpu_vram_used_gb gauge",
    ])
    for gpu in gpus:
        lines.append(f'dash_gpu_vram_used_gb{{gpu="{gpu.id}"}} {gpu.vram_used}')
    lines.extend([
        "",
        "# HELP dash_storage_usage_percent Volume usage percent",
        "# TYPE dash_storage_usage_percent gauge",
    ])
    for volume in await repository.storage.list_all():
        lines.append(f'dash_storage_usage_percent{{volume="{volume.id}"}} {volume.usage_percent}')
    lines.extend([
        "",
        "# HELP dash_service_up Whether a service is operational (1) or not (0)",
        "# TYPE dash_service_up gauge",
    ])
    for service in await repository.services.list_all():
        val = 1 if service.status == "operational" else 0
        lines.append(f'dash_service_up{{service="{service.id}"}} {val}')
    lines.extend([
        "",
        "# HELP dash_telemetry_observers Connected telemetry observers",
        "# TYPE dash_telemetry_observers gauge",
        f"dash_telemetry_observers {state.broadcaster.observer_count}",
        "",
        "# HELP dash_event_log_size Events currently retained",
        "# TYPE dash_event_log_size gauge",
        f"dash_event_log_size {len(repository.events)}",
        "",
    ])

    return PlainTextResponse("\n".join(lines), media_type="text/plain; version=0.0.4; charset=utf-8")
