from .service import GenerationConfig, GenerationService
from .utterance_generator import UtteranceGenerator

__all__ = ["GenerationConfig", "GenerationService", "UtteranceGenerator"]
