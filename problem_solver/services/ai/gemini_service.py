"""
Gemini AI Service Implementation
"""
import base64
from typing import List, Optional, Dict, Any
from google.generativeai import GenerativeModel
from google.generativeai.types import HarmCategory, HarmBlockThreshold
import google.generativeai as genai
from loguru import logger

from problem_solver.core.interfaces.ai_service import SolutionProvider, AIResponse
from problem_solver.utils.key_rotation import KeyRotationManager, mask_key


class GeminiService(SolutionProvider):
    """
    Google Gemini solution provider

    Features:
    - Multi-key rotation for load balancing
    - Text and single-image multimodal prompts
    - Fixed generation parameters and harassment filtering

    Each call makes exactly one request. A failed request is reported to the
    key pool and returned as an unsuccessful AIResponse.
    """

    # Generation settings are fixed, not user-configurable
    generation_config = {
        "temperature": 0.4,
        "top_k": 32,
        "top_p": 1,
        "max_output_tokens": 2048,
    }

    safety_settings = {
        HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    }

    def __init__(self, api_keys: Optional[List[str]] = None, model_name: str = "gemini-1.5-flash"):
        """
        Initialize Gemini service

        Args:
            api_keys: List of Gemini API keys. Without keys every call fails.
            model_name: Gemini model to use
        """
        self.api_keys = [key for key in (api_keys or []) if key.strip()]
        self.model_name = model_name
        self.key_manager = KeyRotationManager(keys=self.api_keys) if self.api_keys else None

        logger.info(f"Initialized GeminiService ({model_name}) with {len(self.api_keys)} API keys")

    async def solve(
        self,
        prompt: str,
        image_data: Optional[str] = None,
        mime_type: str = "image/jpeg",
    ) -> AIResponse:
        if self.key_manager is None:
            return AIResponse(success=False, error="Gemini API key is not configured")

        api_key = await self.key_manager.get_next_key()
        if not api_key:
            return AIResponse(
                success=False,
                error="All API keys are currently blocked. Please try again later."
            )

        try:
            genai.configure(api_key=api_key)
            model = GenerativeModel(
                model_name=self.model_name,
                safety_settings=self.safety_settings,
                generation_config=self.generation_config,
            )

            response = await model.generate_content_async(self._build_content(prompt, image_data, mime_type))

            # Raises ValueError when the candidate was blocked or empty
            result_text = response.text
        except Exception as error:
            logger.warning(f"❌ Gemini request failed with key {mask_key(api_key)}: {error}")
            await self.key_manager.report_error(api_key, error)
            return AIResponse(
                success=False,
                error=str(error) or error.__class__.__name__,
                metadata={"model": self.model_name, "api_key_prefix": mask_key(api_key)}
            )

        await self.key_manager.report_success(api_key)
        logger.info(f"✅ Gemini request successful with key {mask_key(api_key)}")

        return AIResponse(
            success=True,
            content=result_text,
            metadata={"model": self.model_name, "api_key_prefix": mask_key(api_key)}
        )

    def get_service_name(self) -> str:
        """Return the name of the AI service"""
        return "Google Gemini"

    def is_available(self) -> bool:
        """Check if the service is available/configured"""
        return len(self.api_keys) > 0

    async def get_statistics(self) -> Dict[str, Any]:
        """
        Get service statistics

        Returns:
            Dictionary with service statistics
        """
        key_stats = await self.key_manager.get_key_statistics() if self.key_manager else {}

        return {
            "service_name": self.get_service_name(),
            "model_name": self.model_name,
            "total_keys": len(self.api_keys),
            "available_keys": len([k for k, s in key_stats.items() if not s["is_blocked"]]),
            "key_statistics": key_stats,
        }

    @staticmethod
    def _build_content(prompt: str, image_data: Optional[str], mime_type: str) -> List[Dict[str, Any]]:
        """Prompt text part followed by an optional inline image part"""
        content: List[Dict[str, Any]] = [{"text": prompt}]
        if image_data:
            if image_data.startswith("data:"):
                image_data = image_data.split(",", 1)[1]
            content.append({
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64.b64decode(image_data)
                }
            })
        return content
