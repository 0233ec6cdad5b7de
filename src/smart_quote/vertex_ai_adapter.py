from __future__ import annotations

import logging

import vertexai
from vertexai.generative_models import GenerationConfig, GenerativeModel

from .dictionaries import ITEM_NAME_MAX_LENGTH

logger = logging.getLogger(__name__)

DESCRIPTION_PROMPT = (
    "Melhore a descrição comercial deste produto para uma cotação formal, "
    "seja breve e profissional (máximo {limit} caracteres): \"{name}\""
)


class VertexAIAdapter:
    """Adapter for Vertex AI Gemini models."""

    def __init__(
        self,
        *,
        project_id: str | None = None,
        location: str = "us-central1",
        model_name: str = "gemini-2.5-flash",
        model: GenerativeModel | None = None,
    ) -> None:
        """Initialize Vertex AI adapter.

        Args:
            project_id: GCP project ID
            location: Vertex AI location
            model_name: Model name (e.g., "gemini-2.5-flash")
            model: Preconfigured model; skips Vertex AI initialisation when given
        """
        self.project_id = project_id
        self.location = location
        self.model_name = model_name

        if model is None:
            vertexai.init(project=project_id, location=location)
            model = GenerativeModel(model_name)
        self.model = model

    def generate_content(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 256,
    ) -> str:
        """Generate content using Vertex AI.

        Args:
            prompt: Input prompt
            temperature: Sampling temperature (0.0 - 1.0)
            max_output_tokens: Maximum output tokens

        Returns:
            Generated text
        """
        generation_config = GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

        response = self.model.generate_content(
            prompt,
            generation_config=generation_config,
        )

        generated_text = response.text

        logger.info(
            "Generated content with Vertex AI",
            extra={
                "model": self.model_name,
                "temperature": temperature,
                "input_length": len(prompt),
                "output_length": len(generated_text),
            },
        )

        return generated_text

    def enhance_item_description(self, name: str) -> str:
        """Rewrite an item name as a short commercial description.

        Args:
            name: Current item name

        Returns:
            Improved text of at most 250 characters, or ``name`` unchanged on failure
        """
        if not name:
            return name

        prompt = DESCRIPTION_PROMPT.format(limit=ITEM_NAME_MAX_LENGTH, name=name)
        try:
            improved = self.generate_content(prompt).strip()[:ITEM_NAME_MAX_LENGTH]
        except Exception:
            logger.error(
                "Failed to enhance item description with Vertex AI",
                exc_info=True,
                extra={"item_name": name},
            )
            # Return original text on failure
            return name

        return improved or name


__all__ = ["VertexAIAdapter"]
