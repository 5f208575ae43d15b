import json
import logging
from typing import Optional, Protocol

import google.generativeai as genai  # type: ignore
from pydantic import BaseModel, ValidationError

from .config_loader import API_KEYS, CONFIG
from .exceptions import GenerationError
from .response_schemas import ResponseContract

logger = logging.getLogger(__name__)


class ContentGenerator(Protocol):
    """Anything that can turn an instruction into a value conforming to a contract."""

    async def generate(
        self, instruction: str, contract: ResponseContract
    ) -> BaseModel: ...


class GeminiClient:
    """A client for the Google Gemini API constrained by response schemas."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        """Initializes the Gemini client and configures the API key."""
        self.api_key = api_key or getattr(API_KEYS, "google_api_key", None)
        self.model_name = model_name or CONFIG.gemini.model
        if not self.api_key:
            logger.error("Gemini API key not found in configuration.")
            self.model = None
            return
        try:
            genai.configure(api_key=self.api_key)
            self.model = genai.GenerativeModel(self.model_name)
        except Exception as e:
            logger.error(f"Failed to configure Gemini client: {e}")
            self.model = None

    async def generate(self, instruction: str, contract: ResponseContract) -> BaseModel:
        """
        Sends one instruction to Gemini and validates the JSON it returns.

        The call is made exactly once. Timeouts are left to the SDK.

        Args:
            instruction (str): The natural-language request.
            contract (ResponseContract): The schema the answer must conform to.

        Returns:
            BaseModel: An instance of ``contract.model``.

        Raises:
            GenerationError: If the client is unconfigured, the call fails, or
                the answer is not JSON matching the contract.
        """
        if not self.model:
            raise GenerationError("Gemini client is not configured.")
        try:
            response = await self.model.generate_content_async(
                instruction,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=contract.schema,
                ),
            )
            payload = json.loads(response.text.strip())
        except Exception as e:
            logger.error("Gemini generation failed for '%s': %s", contract.name, e)
            raise GenerationError(f"Gemini generation failed: {e}") from e
        try:
            return contract.validate_payload(payload)
        except ValidationError as e:
            logger.error(
                "Gemini response did not match the '%s' schema: %s", contract.name, e
            )
            raise GenerationError(
                f"Gemini response did not match the '{contract.name}' schema."
            ) from e
