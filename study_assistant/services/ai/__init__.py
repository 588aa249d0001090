"""AI generation: providers, gateway, token budget and content generators."""
from .gateway import AiGateway, get_ai_gateway
from .usage_ledger import UsageLedger
from .service import ContentGenerationService, get_generation_service, get_study_set_namer

__all__ = [
    "AiGateway",
    "get_ai_gateway",
    "UsageLedger",
    "ContentGenerationService",
    "get_generation_service",
    "get_study_set_namer",
]
