"""Demo inventory installed at startup when ``dash_seed_data`` is enabled."""

from datetime import timedelta

import structlog

from unified_dash.schemas.automation import AutomationStats
from unified_dash.schemas.base import utcnow
from unified_dash.schemas.models import ModelEntry
from unified_dash.schemas.services import Service
from unified_dash.schemas.telemetry import Gpu, StorageVolume
from unified_dash.schemas.vision import Camera, Caption
from unified_dash.services.repository import Repository

logger = structlog.get_logger()

SERVICES = [
    # (id, name, category, status, url, container, uptime)
    ("langfuse", "Langfuse", "ai", "operational", "http://localhost:3001", "langfuse_abc123", 99.8),
    ("flowise", "Flowise", "ai", "operational", "http://localhost:3002", "flowise_def456", 98.5),
    ("n8n", "n8n", "automation", "operational", "http://localhost:5678", "n8n_ghi789", 99.9),
    ("ollama", "Ollama", "ai", "operational", "http://localhost:11434", "ollama_jkl012", 100.0),
    ("supabase", "Supabase", "db", "operational", "http://localhost:54321", "supabase_mno345", 99.7),
    ("qdrant", "Qdrant", "db", "warning", "http://localhost:6333", "qdrant_pqr678", 95.2),
    ("neo4j", "Neo4j", "db", "operational", "http://localhost:7474", "neo4j_stu901", 98.1),
    ("caddy", "Caddy", "infra", "operational", None, "caddy_vwx234", 99.99),
]

CAMERAS = [
    # (id, name, enabled, rate_limit)
    ("front_door", "Front Door", True, 60),
    ("driveway", "Driveway", True, 60),
    ("backyard", "Backyard", True, 90),
    ("garage", "Garage", True, 60),
    ("side_gate", "Side Gate", False, 60),
    ("porch", "Front Porch", True, 60),
]


async def seed_repository(repository: Repository) -> None:
    now = utcnow()

    for sid, name, category, status, url, container, uptime in SERVICES:
        await repository.services.add(
            Service(
                id=sid,
                name=name,
                category=category,
                status=status,
                url=url,
                container_id=container,
                uptime=uptime,
                last_checked=now,
            )
        )

    await repository.gpus.add(
        Gpu(id="gpu0", name="GPU 0", utilization=0.76, vram_used=52, vram_total=80,
            temperature=72, jobs_queued=3, last_updated=now)
    )
    await repository.gpus.add(
        Gpu(id="gpu1", name="GPU 1", utilization=0.01, vram_used=4, vram_total=80,
            temperature=45, jobs_queued=0, last_updated=now)
    )

    for vid, name, path, used, total, category in [
        ("models", "Models Drive", "/mnt/models", 1880, 2000, "models"),
        ("data", "Data Drive", "/mnt/data", 450, 1000, "data"),
        ("system", "System Drive", "/", 180, 500, "system"),
    ]:
        await repository.storage.add(
            StorageVolume(
                id=vid,
                name=name,
                path=path,
                used_gb=used,
                total_gb=total,
                usage_percent=round(used / total * 100, 1),
                category=category,
                last_updated=now,
            )
        )

    await repository.cameras.add(
        Camera(
            id="tracker",
            name="Tracker Camera",
            enabled=True,
            caption_enabled=True,
            rate_limit=60,
            last_caption="Person walking towards front door",
            last_caption_time=now - timedelta(minutes=5),
        )
    )
    for cid, name, enabled, rate_limit in CAMERAS:
        await repository.cameras.add(Camera(id=cid, name=name, enabled=enabled, rate_limit=rate_limit))

    for minutes_ago, text in [
        (5, "Person walking towards front door with package"),
        (120, "Motion detected near vehicle in driveway"),
        (240, "Cat walking across porch"),
    ]:
        await repository.captions.create(
            camera_id="tracker",
            camera_name="Tracker Camera",
            caption=text,
            timestamp=now - timedelta(minutes=minutes_ago),
        )

    await repository.automation.set(
        AutomationStats(total_entities=443, active_automations=1, total_automations=1, last_updated=now)
    )

    for model in [
        ModelEntry(id="llama3_70b", name="Llama 3 70B", provider="Ollama", placement="GPU0",
                   vram_footprint=42, typical_latency=450, is_pinned=True),
        ModelEntry(id="mistral_7b", name="Mistral 7B", provider="LMStudio", placement="GPU1",
                   vram_footprint=5.2, typical_latency=85, is_pinned=False),
        ModelEntry(id="sd_xl", name="Stable Diffusion XL", provider="LocalAI", placement="GPU0",
                   vram_footprint=12, typical_latency=2500, is_pinned=True),
        ModelEntry(id="codellama", name="CodeLlama 34B", provider="Ollama", placement="GPU0",
                   vram_footprint=20, typical_latency=320, is_pinned=False),
    ]:
        await repository.models.add(model)

    for minutes_ago, category, severity, title, description in [
        (60, "service", "info", "Langfuse service started", "Service successfully initialized and ready"),
        (30, "gpu", "warning", "GPU0 high utilization", "GPU0 has been at 76% utilization for extended period"),
        (15, "storage", "error", "Models drive at 94% capacity",
         "Critical storage warning - consider offloading to MinIO"),
        (5, "vision", "info", "New caption generated", "Tracker Camera: Person walking towards front door"),
    ]:
        await repository.events.record(
            category=category,
            severity=severity,
            title=title,
            description=description,
            timestamp=now - timedelta(minutes=minutes_ago),
        )

    logger.info(
        "repository_seeded",
        services=len(repository.services),
        gpus=len(repository.gpus),
        cameras=len(repository.cameras),
        events=len(repository.events),
    )
