from unified_dash.schemas.base import DashModel


class ModelEntry(DashModel):
    id: str
    name: str
    provider: str  # LMStudio, Ollama, LocalAI
    placement: str  # GPU0, GPU1, CPU
    vram_footprint: float | None = None  # GB
    typical_latency: int | None = None  # ms
    is_pinned: bool = False
