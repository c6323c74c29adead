# Export all models for easy importing
from .assistants import AssistantOption, PredictionRequest

__all__ = [
    "AssistantOption", "PredictionRequest",
]
