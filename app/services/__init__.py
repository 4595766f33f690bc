# Services package - AI clients, parsing, orchestration and export
from app.services.openai_responses import OpenAIResponsesClient, OpenAIImageClient
from app.services.gemini_image import GeminiImageService
from app.services.response_parser import parse_ai_response, extract_bio_values
from app.services.orchestrator import GenerationOrchestrator, BioGenerationResult
from app.services.export import build_pdf, build_print_document, export_filename

__all__ = [
    "OpenAIResponsesClient",
    "OpenAIImageClient",
    "GeminiImageService",
    "parse_ai_response",
    "extract_bio_values",
    "GenerationOrchestrator",
    "BioGenerationResult",
    "build_pdf",
    "build_print_document",
    "export_filename",
]
